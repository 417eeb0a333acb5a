"""Member directory."""

from .manager import UserManager

__all__ = ["UserManager"]
