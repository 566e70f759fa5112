"""
Prometheus metrics module for FieldOps.

Service timings come from ``@BaseService.measure_operation``; the event
dispatcher and the technician schedule locks report their own counters.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "fieldops_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "fieldops_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "fieldops_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

domain_events_total = Counter(
    "fieldops_domain_events_total",
    "Domain events emitted, by outcome",
    ["event_type", "status"],
    registry=REGISTRY,
)

event_handler_failures_total = Counter(
    "fieldops_event_handler_failures_total",
    "Event handler invocations that raised",
    ["event_type"],
    registry=REGISTRY,
)

technician_lock_wait_seconds = Histogram(
    "fieldops_technician_lock_wait_seconds",
    "Time spent waiting for a technician schedule lock",
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'SchedulingService')
            operation: Operation/method name (e.g., 'create_visit')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_domain_event(event_type: str, status: str, failed_handlers: int = 0) -> None:
        """Record one emit() outcome ('delivered', 'failed', 'timeout')."""
        domain_events_total.labels(event_type=event_type, status=status).inc()
        if failed_handlers:
            event_handler_failures_total.labels(event_type=event_type).inc(failed_handlers)

    @staticmethod
    def observe_technician_lock_wait(duration: float) -> None:
        technician_lock_wait_seconds.observe(max(duration, 0.0))

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
