from .manager import ScreenSettings, default_settings, load_settings, parse_settings

__all__ = ["ScreenSettings", "default_settings", "load_settings", "parse_settings"]
