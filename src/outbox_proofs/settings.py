from __future__ import annotations
import hashlib

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    # Any hashlib algorithm with a 32-byte digest
    hash_algorithm: str = Field(default="sha256", alias="OUTBOX_HASH_ALGORITHM")

    log_level: str = Field(default="INFO", alias="OUTBOX_LOG_LEVEL")

    # Shorten 64-char hex digests in log lines
    abbreviate_digests: bool = Field(default=True, alias="OUTBOX_ABBREVIATE_DIGESTS")

    @field_validator("hash_algorithm")
    @classmethod
    def _must_be_256_bit(cls, v: str) -> str:
        try:
            size = hashlib.new(v).digest_size
        except ValueError as e:
            raise ValueError(f"unknown hash algorithm: {v}") from e
        if size != 32:
            raise ValueError(f"{v} produces {size}-byte digests; 32 required")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()  # load at import
