"""
Repository layer for FieldOps.

Repositories own queries; services own transactions.
"""

from .account_repository import AccountRepository
from .base_repository import BaseRepository, IRepository
from .job_repository import JobRepository
from .user_repository import UserRepository
from .visit_repository import VisitRepository

__all__ = [
    "IRepository",
    "BaseRepository",
    "AccountRepository",
    "JobRepository",
    "UserRepository",
    "VisitRepository",
]
