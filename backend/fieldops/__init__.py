"""FieldOps: field-service scheduling core."""

__version__ = "0.1.0"
