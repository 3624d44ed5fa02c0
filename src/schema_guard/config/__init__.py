"""
Configuration module.
Exports the singleton settings instance.
"""
from .settings import settings

__all__ = ["settings"]
