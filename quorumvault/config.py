"""
Configuration management for QuorumVault.
"""
from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from quorumvault.types import ExecutionPolicy, OwnerConfig


class Settings(BaseSettings):
    """Application settings loaded from ``QUORUMVAULT_*`` environment variables."""

    # Owner set and quorum
    owners: Annotated[List[str], NoDecode] = Field(default_factory=list)
    threshold: int = 1
    execution_policy: ExecutionPolicy = ExecutionPolicy.CONSUME

    # Blockchain Configuration
    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: int = 31337
    poa_chain: bool = False
    pool_private_key: Optional[str] = None
    gas_limit: int = 200_000
    receipt_timeout: float = 120.0

    # Logging Configuration
    log_level: str = "INFO"
    log_file_enabled: bool = False
    log_file_path: str = "./logs/quorumvault_audit.log"

    @field_validator("owners", mode="before")
    @classmethod
    def split_owners(cls, v: Any) -> Any:  # noqa: ANN401
        """Accept a JSON list or a comma separated string of owners."""
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                return json.loads(text)
            return [item.strip() for item in text.split(",") if item.strip()]
        return v

    @field_validator("owners")
    @classmethod
    def validate_owner_addresses(cls, v: List[str]) -> List[str]:
        """Validate owners look like Ethereum addresses."""
        for owner in v:
            if not (isinstance(owner, str) and len(owner) == 42 and owner.startswith("0x")):
                raise ValueError(f"Owner must be a valid Ethereum address (0x...), got {owner!r}")
        return v

    @field_validator("pool_private_key")
    @classmethod
    def validate_private_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate private key format if provided."""
        if v and not (isinstance(v, str) and len(v) in [64, 66]):
            raise ValueError("Private key must be 64 or 66 characters long")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {v!r}")
        return level

    def owner_config(self) -> OwnerConfig:
        """Build the validated owner set and threshold."""
        return OwnerConfig.create(self.owners, self.threshold)

    model_config = {
        "env_file": ".env",
        "env_prefix": "QUORUMVAULT_",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
