# backend/fieldops/services/base.py
"""
Base Service Pattern for FieldOps

Provides common functionality for all service classes including:
- Units of work: blocking ORM work in a worker thread, in a session that
  thread owns, committed once and bounded by a timeout
- Logging
- Performance monitoring
"""

import asyncio
from functools import wraps
import logging
import threading
import time
from typing import Any, Callable, Optional, TypeVar, cast

from sqlalchemy.orm import Session, sessionmaker

from ..core.config import settings
from ..core.exceptions import OperationTimeoutException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    """
    Base class for all service layer components.

    Services own transaction boundaries. Each unit of work opens its own
    session from ``session_factory`` inside the worker thread and closes it
    there, so nothing outside that thread can touch it mid-transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        """
        Initialize base service.

        Args:
            session_factory: Factory for per-unit-of-work sessions
        """
        self.session_factory = session_factory
        self.logger = logging.getLogger(self.__class__.__name__)

    def run_in_session(
        self,
        operation: str,
        fn: Callable[[Session], T],
        abandoned: Optional[threading.Event] = None,
    ) -> T:
        """
        Run ``fn`` in a fresh session and commit. Blocking; call from a worker thread.

        If ``abandoned`` is set by the time ``fn`` returns, the caller has
        already reported a timeout: the work is rolled back, not committed.
        """
        with self.session_factory() as session:
            try:
                result = fn(session)
                if abandoned is not None and abandoned.is_set():
                    self.logger.warning(f"{operation} finished after its caller timed out; rolled back")
                    raise OperationTimeoutException(operation, settings.persistence_timeout_seconds)
                session.commit()
            except Exception:
                session.rollback()
                raise
        return result

    async def run_db(
        self,
        operation: str,
        fn: Callable[[Session], T],
        timeout_seconds: Optional[float] = None,
    ) -> T:
        """
        Run one unit of work in a worker thread, bounded by a timeout.

        Args:
            operation: Name used in logs and in the timeout error
            fn: Callable doing the database work with the session it is given
            timeout_seconds: Defaults to ``settings.persistence_timeout_seconds``

        Raises:
            OperationTimeoutException: If the work does not finish in time
                (the work is then rolled back unless it had already committed)
        """
        timeout = timeout_seconds or settings.persistence_timeout_seconds
        abandoned = threading.Event()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.run_in_session, operation, fn, abandoned),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            abandoned.set()
            self.logger.error(f"Database work for {operation} timed out after {timeout}s")
            raise OperationTimeoutException(operation, timeout) from exc

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_visit")
            async def create_visit(self, ctx, data):
                ...

        Args:
            operation_name: Name of the operation for metrics

        Returns:
            Decorator function
        """

        def decorator(func: F) -> F:
            if not asyncio.iscoroutinefunction(func):

                @wraps(func)
                def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.time()
                    error_type: Optional[str] = None
                    try:
                        return func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _finish_measurement(self, operation_name, start_time, error_type)

                return cast(F, wrapper)

            @wraps(func)
            async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                error_type: Optional[str] = None
                try:
                    return await func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _finish_measurement(self, operation_name, start_time, error_type)

            return cast(F, async_wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Use @measure_operation for timing.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})


def _finish_measurement(
    service: Any, operation_name: str, start_time: float, error_type: Optional[str]
) -> None:
    elapsed = time.time() - start_time

    # Only log if it's actually slow
    if elapsed > 1.0 and hasattr(service, "logger"):
        service.logger.warning(f"Slow operation detected: {operation_name} took {elapsed:.2f}s")

    try:
        prometheus_metrics.record_service_operation(
            service=service.__class__.__name__,
            operation=operation_name,
            duration=elapsed,
            status="success" if error_type is None else "error",
            error_type=error_type,
        )
    except Exception:
        # Don't let metrics collection break the operation
        logger.debug("Failed to record metrics for %s", operation_name, exc_info=True)
