from __future__ import annotations

from pathlib import Path
from typing import Any, Final, Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smart_contracts.pending_issuance.enums import BouncePolicy
from smart_contracts.pending_issuance.storage import pending_issuance_code

from ..codec import to_micro_units, validate_address
from ..errors import ServiceConfigError
from ..keys import DEFAULT_KEYS_FILE

Network = Literal["mainnet", "testnet", "localnet"]

DEFAULT_PORT: Final[int] = 3000


class ServiceConfig(BaseSettings):
    """
    Signer service settings, read from NETWORK, ISSUER_ADDRESS, CATALOG_ADDRESS,
    DEFAULT_PRICE, PORT, SIGNER_KEYS_PATH, ITEM_ACTIVATION_TIME and BOUNCE_POLICY.

    DEFAULT_PRICE is given in whole units; a `default_price` passed as an int is
    already micro-units.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    network: Network = "localnet"
    issuer_address: str | None = None
    catalog_address: str | None = None
    default_price: int = Field(default=to_micro_units(1), ge=0)
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    keys_path: Path = Field(
        default=Path(DEFAULT_KEYS_FILE),
        validation_alias=AliasChoices("keys_path", "signer_keys_path"),
    )
    item_activation_time: int = Field(default=0, ge=0)
    bounce_policy: BouncePolicy = BouncePolicy.REFUND_ONLY

    @field_validator("issuer_address", "catalog_address")
    @classmethod
    def _check_address(cls, value: str | None) -> str | None:
        return None if value is None else validate_address(value)

    @field_validator("default_price", mode="before")
    @classmethod
    def _units_to_micro(cls, value: Any) -> Any:
        if isinstance(value, str):
            return to_micro_units(value)
        return value

    @property
    def pending_code(self) -> bytes:
        return pending_issuance_code(self.bounce_policy).to_bytes()

    def require_issuer(self) -> str:
        if not self.issuer_address:
            raise ServiceConfigError("Issuer address not configured")
        return self.issuer_address

    @classmethod
    def from_environment(cls) -> ServiceConfig:
        """
        Load the settings from the process environment.

        Raises:
            ServiceConfigError: If any variable fails validation.
        """
        try:
            return cls()
        except ValidationError as e:
            raise ServiceConfigError(f"Invalid service configuration: {e}") from e
