"""Configuration management for dashrecord.

Settings come from ``DASHRECORD_*`` environment variables (or a ``.env``
file) and fall back to the defaults below.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OptionPolicy(str, Enum):
    """How ``declare`` treats options omitted on a redeclaration.

    STICKY keeps whatever a previous declaration registered. Defaults and
    validators are removed only by passing ``CLEAR``; the required flag only
    by passing ``required=False``.

    REPLACE reproduces the classic Dash behaviour: omitting ``default`` or
    ``validate`` removes a previously registered one, while ``required`` is
    additive only.
    """

    STICKY = "sticky"
    REPLACE = "replace"


class DashRecordConfig(BaseSettings):
    """Runtime settings for dashrecord."""

    log_level: str = Field(
        default="INFO",
        description="Log level used by setup_logging()",
    )

    option_policy: OptionPolicy = Field(
        default=OptionPolicy.STICKY,
        description="Redeclaration policy for newly created root schemas",
    )

    repr_max_string: int | None = Field(
        default=80,
        description="Truncate long strings when pretty-printing records (None disables)",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="DASHRECORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_config() -> DashRecordConfig:
    """Return the process-wide configuration, loading it on first use."""
    return DashRecordConfig()


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    get_config.cache_clear()
