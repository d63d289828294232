"""Package settings and document defaults.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings hold
the default values a fresh metadata document starts with, and the
defaults the legacy converter falls back to when a legacy document
omits a field.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from s2tilejson.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.default_scheme)
        fzxy

    Environment variables can override defaults:
        >>> S2TILEJSON_DEFAULT_NAME=basemap
        >>> S2TILEJSON_LEGACY_DEFAULT_MAXZOOM=22
"""

import functools

import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Document defaults pulled from environment variables or defaults.

    All settings can be overridden via ``S2TILEJSON_``-prefixed environment
    variables or a .env file.

    Attributes:
        s2tilejson_version: Value of the canonical-format marker field.
        default_name: Name of a freshly built document.
        default_version: Data version of a freshly built document.
        default_description: Description of a freshly built document.
        default_scheme: Tile scheme of a freshly built document.
        default_source_type: Source type of a freshly built document.
        default_extension: Tile extension when none is known.
        default_encoding: Tile encoding of a freshly built document.
        legacy_default_name: Name given to a legacy document without one.
        legacy_default_description: Description for a legacy document
            without one.
        legacy_default_scheme: Scheme assumed for a legacy document.
        legacy_default_minzoom: Minzoom assumed for a legacy document.
        legacy_default_maxzoom: Maxzoom assumed for a legacy document.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     default_name="OSM",
            ...     legacy_default_maxzoom=22,
            ... )
    """

    s2tilejson_version: str = "1.0.0"
    default_name: str = "default"
    default_version: str = "1.0.0"
    default_description: str = "Built with s2maps-cli"
    default_scheme: str = "fzxy"
    default_source_type: str = "vector"
    default_extension: str = "pbf"
    default_encoding: str = "none"
    legacy_default_name: str = "default"
    legacy_default_description: str = ""
    legacy_default_scheme: str = "xyz"
    legacy_default_minzoom: int = 0
    legacy_default_maxzoom: int = 27

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="S2TILEJSON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the process. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
