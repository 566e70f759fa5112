# backend/fieldops/services/conflict_checker.py
"""
Conflict Checker Service for FieldOps

Detects technician double-booking. Visit intervals are half-open,
``[start_time, end_time)``: two intervals conflict iff
``s1 < e2 and s2 < e1``. Touching endpoints never conflict, and only
visits of the same technician are considered.

The checker is synchronous; the scheduling service calls it from the
worker thread that also performs the insert, inside one transaction.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..repositories.visit_repository import VisitRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open interval overlap: ``[start_a, end_a)`` vs ``[start_b, end_b)``."""
    return start_a < end_b and start_b < end_a


class ConflictChecker:
    """
    Checks technician schedule conflicts within the caller's session.
    """

    def __init__(self, db: Session, repository: Optional[VisitRepository] = None):
        self.logger = logging.getLogger(__name__)
        self.repository = repository or VisitRepository(db)

    @BaseService.measure_operation("has_conflict")
    def has_conflict(
        self,
        technician_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_visit_id: Optional[str] = None,
    ) -> bool:
        """
        Check if the technician already has a visit overlapping the interval.

        Args:
            technician_id: The technician to check
            start_time: Inclusive start of the requested interval
            end_time: Exclusive end of the requested interval
            exclude_visit_id: Optional visit ID to exclude from the check

        Returns:
            True if there is at least one conflict, False otherwise
        """
        conflict = self.repository.has_overlapping_visit(
            technician_id, start_time, end_time, exclude_visit_id
        )
        if conflict:
            self.logger.warning(
                f"Schedule conflict for technician {technician_id} "
                f"between {start_time.isoformat()}-{end_time.isoformat()}"
            )
        return conflict

    @BaseService.measure_operation("find_conflicts")
    def find_conflicts(
        self,
        technician_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_visit_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List the visits that overlap the requested interval.

        Returns:
            List of conflicts with visit details, earliest first
        """
        visits = self.repository.find_overlapping(
            technician_id, start_time, end_time, exclude_visit_id
        )
        return [
            {
                "visit_id": visit.id,
                "job_id": visit.job_id,
                "start_time": visit.start_time.isoformat(),
                "end_time": visit.end_time.isoformat(),
            }
            for visit in visits
        ]
