"""ORM models. Importing this package registers every table on Base.metadata."""

from .account import Account, AccountAddress, AccountContact
from .job import Job
from .user import User
from .visit import Visit

__all__ = ["Account", "AccountAddress", "AccountContact", "Job", "User", "Visit"]
