"""
Services package for the UFL records bot.

Read-side services (snapshots, rankings) and admin access.
"""

from .base import BaseService
from .snapshot import SnapshotService
from .rankings import RankingService
from .admin_auth import AdminAuthService

__all__ = ['BaseService', 'SnapshotService', 'RankingService', 'AdminAuthService']
