"""Configuration utilities for gcp-switcher."""

from .settings import SwitcherConfig, get_config_path, load_config

__all__ = ["SwitcherConfig", "get_config_path", "load_config"]
