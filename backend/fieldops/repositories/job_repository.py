"""Job Repository for FieldOps."""

import logging

from sqlalchemy.orm import Query, Session, selectinload

from ..models.job import Job
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class JobRepository(BaseRepository[Job]):
    def __init__(self, db: Session):
        super().__init__(db, Job)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Job.visits))
