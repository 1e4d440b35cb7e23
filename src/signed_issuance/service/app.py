"""HTTP surface of the signer."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..codec import format_units, offchain_content, parse_price, validate_address
from ..errors import ChainViewUnavailableError, SignedIssuanceError
from ..keys import SignerKeys
from ..signing import MintRequest, SignerContext, batch_sign, calculate_address, sign_mint
from .config import ServiceConfig

logger = logging.getLogger(__name__)


class ChainView(Protocol):
    def is_deployed(self, address: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class ServiceContext:
    keys: SignerKeys
    config: ServiceConfig
    chain_view: ChainView | None = None

    def signer_context(self) -> SignerContext:
        return SignerContext(
            keys=self.keys,
            issuer_address=self.config.require_issuer(),
            pending_code=self.config.pending_code,
            activation_time=self.config.item_activation_time,
            default_price=self.config.default_price,
        )


class MintItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    owner_account: str = Field(alias="ownerAccount")
    content: str = Field(min_length=1, description="Metadata URL")
    price: str | int | float | None = None

    def to_mint_request(self) -> MintRequest:
        # JSON numbers follow the same unit rule as strings
        price = None if self.price is None else str(self.price)
        return MintRequest(
            owner=self.owner_account, content=offchain_content(self.content), price=price
        )


class BatchSignRequest(BaseModel):
    items: list[MintItemRequest]


class VerifyDeploymentRequest(BaseModel):
    address: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(service: ServiceContext) -> FastAPI:
    app = FastAPI(title="Signed Issuance Signer", version="0.1.0")

    @app.exception_handler(SignedIssuanceError)
    async def _sdk_error(request: Request, exc: SignedIssuanceError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(ValueError)
    async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = ", ".join(".".join(str(p) for p in err["loc"][1:]) for err in exc.errors())
        return _error(400, f"Invalid request fields: {fields}")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "timestamp": int(time.time() * 1000)}

    @app.get("/info")
    def info() -> dict[str, Any]:
        config = service.config
        return {
            "publicKey": service.keys.public_key.hex(),
            "signerAddress": service.keys.address,
            "network": config.network,
            "issuerAddress": config.issuer_address,
            "catalogAddress": config.catalog_address,
            "itemActivationTime": config.item_activation_time,
            "bouncePolicy": config.bounce_policy.value,
            "defaultPrice": str(config.default_price),
            "defaultPriceFormatted": format_units(config.default_price),
        }

    @app.post("/sign")
    def sign(request: MintItemRequest) -> dict[str, Any]:
        mint = request.to_mint_request()
        signed = sign_mint(service.signer_context(), mint.owner, mint.content, mint.price)
        return {**signed.to_json(), "content": request.content}

    @app.post("/batch-sign")
    def sign_batch(request: BatchSignRequest) -> dict[str, Any]:
        ctx = service.signer_context()
        signed = batch_sign(ctx, [item.to_mint_request() for item in request.items])
        items = [
            {**s.to_json(), "content": item.content}
            for s, item in zip(signed, request.items, strict=True)
        ]
        return {"count": len(items), "items": items}

    @app.post("/calculate-address")
    def address(request: MintItemRequest) -> dict[str, Any]:
        ctx = service.signer_context()
        mint = request.to_mint_request()
        price = parse_price(mint.price, ctx.default_price)
        return {
            "pendingIssuanceAddress": calculate_address(ctx, mint.owner, mint.content, price),
            "ownerAccount": mint.owner,
            "content": request.content,
            "price": str(price),
            "priceFormatted": format_units(price),
        }

    @app.post("/verify-deployment")
    def verify_deployment(request: VerifyDeploymentRequest) -> dict[str, Any]:
        if service.chain_view is None:
            raise ChainViewUnavailableError("No chain view configured")
        address = validate_address(request.address)
        return {"address": address, "deployed": service.chain_view.is_deployed(address)}

    return app
