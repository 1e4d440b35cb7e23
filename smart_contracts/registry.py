"""Resolution of deployable code to the actor class that runs it."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from .actor_common import Actor, CodeTemplate
from .catalog.contract import Catalog
from .issuer.contract import Issuer
from .messages import DECODE_ERRORS
from .pending_issuance.contract import PendingIssuance

ACTOR_TYPES: Final[Mapping[str, type[Actor]]] = {
    cls.CODE_NAME: cls for cls in (PendingIssuance, Issuer, Catalog)
}


def instantiate(code: bytes, data: bytes) -> Actor:
    """
    Build the actor a state init describes.

    Raises:
        ValueError: If the code is not a known template or the data does not
            decode as that actor's storage.
    """
    template = CodeTemplate.from_bytes(code)
    actor_type = ACTOR_TYPES.get(template.name)
    if actor_type is None:
        raise ValueError(f"Unknown actor code: {template.name!r}")
    try:
        return actor_type.from_state_init(template, data)
    except DECODE_ERRORS as e:
        raise ValueError(f"Invalid {template.name} state: {e}") from e
