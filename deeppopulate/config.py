# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Deep populate configuration.

All settings can be overridden via environment variables with the
DEEP_POPULATE_ prefix. List and mapping fields take JSON, for example:

    DEEP_POPULATE_EXCLUDED_PATHS='["/api/users", "/api/seo", "/api/menus"]'
    DEEP_POPULATE_POPULATE_OVERRIDES='{"testimonials": "user.image"}'
"""

# Standard
from functools import lru_cache
import logging
from typing import Any, Dict, List, Optional

# Third-Party
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# First-Party
from deeppopulate.builder import DEFAULT_POPULATE_OVERRIDES

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Deep populate configuration."""

    enabled: bool = Field(default=True, description="Apply deep populate to matching requests")
    api_prefix: str = Field(default="/api/", description="Only paths starting with this prefix are populated")
    excluded_paths: List[str] = Field(
        default_factory=lambda: ["/api/users", "/api/seo"],
        description="Requests whose path contains any of these fragments are left untouched",
    )
    populate_overrides: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_POPULATE_OVERRIDES),
        description="Relation attribute name to the field path populated instead of '*'",
    )
    include_audit_fields: bool = Field(
        default=False,
        description="Populate createdBy/updatedBy even though the visibility policy hides them",
    )
    uid_namespace: str = Field(default="api", description="Namespace used when mapping a path segment to a content-type identifier")
    schema_dir: Optional[str] = Field(default=None, description="Directory of CMS schema files (api/ and components/)")
    log_level: str = Field(default="INFO", description="Logging level for the CLI")

    @field_validator("api_prefix")
    @classmethod
    def ensure_leading_slash(cls, value: str) -> str:
        """Normalise the API prefix to start with a slash.

        Args:
            value: The configured prefix.

        Returns:
            str: The prefix with a leading slash.
        """
        value = value.strip()
        return value if value.startswith("/") else f"/{value}"

    @field_validator("schema_dir", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat an empty environment value as unset.

        Args:
            value: The raw value.

        Returns:
            Any: None for an empty string, otherwise the value.
        """
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    model_config = SettingsConfigDict(env_prefix="DEEP_POPULATE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> get_settings() is get_settings()
        True
    """
    return Settings()


class LazySettingsWrapper:
    """Lazily initialize the settings singleton on attribute access."""

    @staticmethod
    def cache_clear() -> None:
        """Clear the cached settings so the next access re-reads the environment."""
        get_settings.cache_clear()

    def __getattr__(self, key: str) -> Any:
        """Forward attribute access to the real settings object.

        Args:
            key: The setting name.

        Returns:
            Any: The value of the setting.
        """
        return getattr(get_settings(), key)


settings = LazySettingsWrapper()
