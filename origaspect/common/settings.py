# origaspect/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from origaspect.domain.dataclasses.reconcile import ReconcileConfig

DEFAULT_ACCEPTED_ASPECT_RATIOS = "1.33, 1.78, 1.85, 2.00, 2.20, 2.35, 2.37, 2.39, 2.40"
MIN_CHECKS_PER_VIDEO = 3


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


def csv_to_list(v: str | List[str] | tuple | None) -> List[str]:
    """Split a comma-separated value, trimming entries and dropping blanks."""
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s is not None and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class AspectConfig(BaseModel):
    """
    Aspect-ratio reconciliation options. Field names are snake_case; the
    plugin-style names (AcceptedAspectRatios, ...) are accepted as aliases.
    """
    accepted_aspect_ratios: str = Field(
        default=DEFAULT_ACCEPTED_ASPECT_RATIOS,
        validation_alias=AliasChoices("accepted_aspect_ratios", "AcceptedAspectRatios"),
    )
    checks_per_video: int = Field(
        default=10,
        ge=MIN_CHECKS_PER_VIDEO,
        validation_alias=AliasChoices("checks_per_video", "ChecksPerVideo"),
    )
    always_write_original_aspect_ratio: bool = Field(
        default=False,
        validation_alias=AliasChoices("always_write_original_aspect_ratio", "AlwaysWriteOriginalAspectRatio"),
    )
    override_existing_aspect_ratio: bool = Field(
        default=False,
        validation_alias=AliasChoices("override_existing_aspect_ratio", "OverrideExistingAspectRatio"),
    )

    @field_validator("accepted_aspect_ratios", mode="before")
    @classmethod
    def _join_list(cls, v):
        # allow a JSON list in env or a python list from code
        if isinstance(v, (list, tuple)):
            return ", ".join(csv_to_list(v))
        return v

    @field_validator("always_write_original_aspect_ratio", "override_existing_aspect_ratio", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    @property
    def aspect_ratios(self) -> List[str]:
        return csv_to_list(self.accepted_aspect_ratios)

    def to_reconcile_config(self) -> ReconcileConfig:
        """Frozen snapshot handed to the reconciliation engine."""
        return ReconcileConfig(
            accepted_aspect_ratios=tuple(self.aspect_ratios),
            checks_per_video=self.checks_per_video,
            always_write_original_aspect_ratio=self.always_write_original_aspect_ratio,
            override_existing_aspect_ratio=self.override_existing_aspect_ratio,
        )


class ConcurrencyConfig(BaseModel):
    max_reconcile_workers: int = Field(4, ge=1, le=64)


class FFmpegConfig(BaseModel):
    bin: str = Field(default="ffmpeg", validation_alias=AliasChoices("bin", "FFMPEG_BIN"))


class FFprobeConfig(BaseModel):
    timeout_sec: int = 30
    log_level: str = "error"  # quiet|panic|fatal|error|warning|info|verbose|debug|trace
    bin: str = Field(default="ffprobe", validation_alias=AliasChoices("bin", "FFPROBE_BIN"))


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "origaspect"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    aspect: AspectConfig = AspectConfig()
    concurrency: ConcurrencyConfig = ConcurrencyConfig()
    ffmpeg: FFmpegConfig = FFmpegConfig()
    ffprobe: FFprobeConfig = FFprobeConfig()

    # Optional flat override for the ffmpeg binary (FFMPEG_BIN=/opt/ffmpeg/bin/ffmpeg)
    ffmpeg_bin: Optional[str] = Field(default=None, validation_alias=AliasChoices("FFMPEG_BIN", "ffmpeg_bin"))
    ffprobe_bin: Optional[str] = Field(default=None, validation_alias=AliasChoices("FFPROBE_BIN", "ffprobe_bin"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def effective_ffmpeg_bin(self) -> str:
        return self.ffmpeg_bin or self.ffmpeg.bin

    @property
    def effective_ffprobe_bin(self) -> str:
        return self.ffprobe_bin or self.ffprobe.bin


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this at the outer edges (API deps,
    adapter defaults); the engine itself takes a ReconcileConfig argument.
        from origaspect.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
