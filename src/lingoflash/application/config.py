from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lingoflash.domain.constants import PRACTICE_BATCH_CAP, PRACTICE_POOL_FLOOR


class AppConfig(BaseSettings):
    """
    Configuration model for lingoflash.
    Supports loading from:
    1. Environment variables (LINGOFLASH_*)
    2. Config file (~/.config/lingoflash/config.toml)
    3. Manual overrides (CLI / API)
    """

    model_config = SettingsConfigDict(
        env_prefix="LINGOFLASH_",
        extra="ignore",
    )

    # Paths
    library_path: Path = Field(default_factory=lambda: Path.home() / ".config/lingoflash/library.json")

    # Practice batches
    practice_floor: int = Field(default=PRACTICE_POOL_FLOOR, ge=0)
    practice_cap: int = Field(default=PRACTICE_BATCH_CAP, ge=1)
    seed: int | None = None

    # Server
    host: str = "127.0.0.1"
    port: int = 8780

    # Logging: 0 warnings only, 1 info, 2 debug
    verbose: int = Field(default=0, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Overrides win over env, env wins over the config file
        toml_file = Path.home() / ".config/lingoflash/config.toml"
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("library_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Build the effective configuration. None-valued overrides are ignored so
    unset CLI options fall through to env / file / defaults.
    """
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**clean)
