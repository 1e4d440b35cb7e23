"""Signer service: FastAPI app, configuration and CLI."""

from __future__ import annotations

from .app import ChainView, ServiceContext, create_app
from .config import ServiceConfig

__all__ = ["ChainView", "ServiceConfig", "ServiceContext", "create_app"]
