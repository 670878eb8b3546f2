"""Runtime configuration."""

import os
from typing import ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

ENV_PREFIX = "CL_IMAGE_RESIZE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ResizeSettings(BaseModel):
    """Process-level knobs for the resize pipeline.

    Attributes:
        use_worker: Try the background worker strategy before rendering directly
        probe_timeout: Seconds to wait for the worker's bootstrap probe reply
        fetch_timeout: Seconds allowed for fetching ``http(s)://`` sources
    """

    use_worker: bool = True
    probe_timeout: float = Field(default=5.0, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ResizeSettings":
        """Build settings from ``CL_IMAGE_RESIZE_*`` environment variables.

        Invalid values are logged and replaced by the defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        raw_use_worker = env.get(f"{ENV_PREFIX}USE_WORKER")
        if raw_use_worker is not None:
            flag = raw_use_worker.strip().lower()
            if flag in _TRUE_VALUES:
                values["use_worker"] = True
            elif flag in _FALSE_VALUES:
                values["use_worker"] = False
            else:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}USE_WORKER={raw_use_worker!r}")

        for name in ("probe_timeout", "fetch_timeout"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            logger.warning(f"Invalid resize settings in environment, using defaults: {e}")
            return cls()


_settings: ResizeSettings | None = None


def get_settings() -> ResizeSettings:
    """Get the cached environment-derived settings."""
    global _settings
    if _settings is None:
        _settings = ResizeSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
