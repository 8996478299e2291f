"""Runtime configuration."""
from infinitytrain.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
