"""Configuration module for the user provisioning API."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
