# backend/fieldops/repositories/visit_repository.py
"""
Visit Repository for FieldOps

Data access for technician visits, including the overlap queries used by
the conflict checker and the per-technician schedule lock taken inside
the insert transaction.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.technician_lock import schedule_lock_key
from ..models.visit import Visit
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class VisitRepository(BaseRepository[Visit]):
    """Repository for visit data access."""

    def __init__(self, db: Session):
        super().__init__(db, Visit)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Visit.job))

    def _overlap_query(
        self,
        technician_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_visit_id: Optional[str] = None,
    ) -> Query:
        # Half-open intervals: existing.start < new.end AND new.start < existing.end
        query = self.db.query(Visit).filter(
            Visit.technician_id == technician_id,
            Visit.start_time < end_time,
            Visit.end_time > start_time,
        )
        if exclude_visit_id:
            query = query.filter(Visit.id != exclude_visit_id)
        return query

    def has_overlapping_visit(
        self,
        technician_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_visit_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether the technician already has a visit overlapping the interval.

        Args:
            technician_id: Technician whose schedule is checked
            start_time: Requested start (inclusive)
            end_time: Requested end (exclusive)
            exclude_visit_id: Visit to ignore, e.g. when moving an existing visit

        Returns:
            True if at least one overlapping visit exists
        """
        try:
            query = self._overlap_query(technician_id, start_time, end_time, exclude_visit_id)
            return bool(self.db.query(query.exists()).scalar())
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking visit overlap: {str(e)}")
            raise RepositoryException(f"Failed to check visit overlap: {str(e)}")

    def find_overlapping(
        self,
        technician_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_visit_id: Optional[str] = None,
    ) -> List[Visit]:
        try:
            return cast(
                List[Visit],
                self._overlap_query(technician_id, start_time, end_time, exclude_visit_id)
                .order_by(Visit.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding overlapping visits: {str(e)}")
            raise RepositoryException(f"Failed to find overlapping visits: {str(e)}")

    def lock_technician_schedule(self, technician_id: str) -> None:
        """
        Serialize schedule writes for one technician across processes.

        On PostgreSQL this takes a transaction-scoped advisory lock that is
        released on commit or rollback. Other backends rely on the
        in-process TechnicianLockRegistry alone.
        """
        if self.dialect_name != "postgresql":
            return
        try:
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                {"key": schedule_lock_key(technician_id)},
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error acquiring schedule lock: {str(e)}")
            raise RepositoryException(f"Failed to lock technician schedule: {str(e)}")

    def update_summary(self, visit: Visit, summary: str) -> Visit:
        """Record the work summary on an already loaded visit (no commit)."""
        try:
            visit.summary = summary
            self.db.flush()
            return visit
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating summary for visit {visit.id}: {str(e)}")
            raise RepositoryException(f"Failed to update visit summary: {str(e)}")

    def get_upcoming(
        self,
        since: datetime,
        technician_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Visit]:
        """Visits starting at or after ``since``, earliest first."""
        try:
            query = self.db.query(Visit).filter(Visit.start_time >= since)
            if technician_id:
                query = query.filter(Visit.technician_id == technician_id)
            return cast(List[Visit], query.order_by(Visit.start_time).limit(limit).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting upcoming visits: {str(e)}")
            raise RepositoryException(f"Failed to get upcoming visits: {str(e)}")
