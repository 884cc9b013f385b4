"""Runtime configuration for tree induction."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IMPURITY_THRESHOLD: float = 0.4


class SprintSettings(BaseSettings):
    """Settings read from the environment (prefix `SPRINT_`) or a `.env` file.

    Attributes:
        impurity_threshold (float): Stop-splitting cutoff. A split whose
            weighted Gini impurity is at or above this value is split further;
            below it, the split's two sides become leaves.

    Examples:
        >>> SprintSettings(impurity_threshold=0.25).impurity_threshold
        0.25
    """

    model_config = SettingsConfigDict(env_prefix="SPRINT_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    impurity_threshold: float = Field(
        default=DEFAULT_IMPURITY_THRESHOLD,
        ge=0.0,
        allow_inf_nan=False,
        description="Weighted Gini impurity at or above which a partition keeps splitting.",
    )


@lru_cache(maxsize=1)
def get_settings() -> SprintSettings:
    """Return the process-wide settings, loaded once on first use.

    Returns:
        SprintSettings: The cached settings instance. Call
            `get_settings.cache_clear()` to reload after changing the environment.
    """
    return SprintSettings()
