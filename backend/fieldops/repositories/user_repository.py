"""User Repository for FieldOps."""

import logging

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)
