"""Settings for the logging core."""

from diaglog.config.loader import LogSettings, load_settings

__all__ = ["LogSettings", "load_settings"]
