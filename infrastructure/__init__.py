"""Infrastructure helpers."""

from .settings import get_settings, load_settings, AppSettings
from . import constants

__all__ = ["get_settings", "load_settings", "AppSettings", "constants"]
