"""Version 1 HTTP routes, mounted under ``/api/v1``."""

from . import accounts, jobs, visits

__all__ = ["accounts", "jobs", "visits"]
