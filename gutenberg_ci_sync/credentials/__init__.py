"""Credential backends."""

from gutenberg_ci_sync.credentials.environment_backend import EnvironmentBackend

__all__ = ["EnvironmentBackend"]
