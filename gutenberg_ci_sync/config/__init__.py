"""Configuration for gutenberg-ci-sync.

Example:
    >>> from gutenberg_ci_sync.config import SyncSettings, load_token
    >>> settings = SyncSettings()
    >>> token = load_token(settings)
"""

from gutenberg_ci_sync.config.settings import (
    ControlRepositoryConfig,
    SyncSettings,
    UpstreamRepositoryConfig,
    load_token,
)

__all__ = [
    "ControlRepositoryConfig",
    "SyncSettings",
    "UpstreamRepositoryConfig",
    "load_token",
]
