"""User store package: table setup, statistics and connectivity probe."""

from .store import ensure_users_table, fetch_user_stats, probe

__all__ = ["ensure_users_table", "fetch_user_stats", "probe"]
