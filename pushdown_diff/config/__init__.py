"""Configuration management."""

from .manager import ConfigManager, HarnessConfig, BackendConfig

__all__ = ["ConfigManager", "HarnessConfig", "BackendConfig"]
