"""Administrator reports."""

from .dashboard import AdminDashboard

__all__ = ["AdminDashboard"]
