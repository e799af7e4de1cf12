"""KARGO server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class KargoServerSettings(BaseSettings):
    model_config = {"env_prefix": "KARGO_"}

    max_rooms: int = Field(default=500, ge=1)
    max_players_per_room: int = Field(default=8, ge=2, le=13)  # 13 * 4 cards fits one deck
    log_dir: str | None = None
    cors_origins: list[str] = ["http://localhost:5173"]

    # Per-connection token bucket: sustained messages/sec and burst size
    rate_limit_rate: float = Field(default=10.0, gt=0)
    rate_limit_burst: int = Field(default=20, ge=1)
    # Disconnect after this many consecutive undecodable frames
    max_decode_errors: int = Field(default=5, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
