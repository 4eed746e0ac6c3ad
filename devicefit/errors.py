"""
Error Definitions for devicefit

This module defines the exception classes raised by the scheduling core so
callers can tell an unreachable inventory store apart from a contract
violation inside a scheduling cycle.
"""

from typing import Any, Dict, Optional


class DeviceFitError(Exception):
    """Base exception class for all devicefit errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InventoryLookupError(DeviceFitError):
    """Raised when the inventory store cannot answer for a machine."""

    def __init__(self, node_name: str, reason: str, **details):
        message = f"Inventory lookup failed for node {node_name}: {reason}"

        super().__init__(message, {"node_name": node_name, "reason": reason, **details})
        self.node_name = node_name
        self.reason = reason


class AggregationMissingError(DeviceFitError):
    """Raised when a score is requested before the cycle maxima were collected."""

    def __init__(self, dimension: str, cycle_id: Optional[str] = None, **details):
        message = f"Cycle state has no maximum for dimension '{dimension}'"
        if cycle_id:
            message += f" in cycle {cycle_id}"

        super().__init__(message, {"dimension": dimension, "cycle_id": cycle_id, **details})
        self.dimension = dimension
        self.cycle_id = cycle_id


class NoCandidatesError(DeviceFitError):
    """Raised when maxima are collected over an empty cluster."""

    def __init__(self, workload: Optional[str] = None, **details):
        if workload:
            message = f"No candidate machines to collect maxima for workload {workload}"
        else:
            message = "No candidate machines to collect maxima"

        super().__init__(message, {"workload": workload, **details})
        self.workload = workload


class ScoringError(DeviceFitError):
    """Raised when a machine cannot be scored for a request."""

    def __init__(self, node_name: str, reason: str, **details):
        message = f"Cannot score node {node_name}: {reason}"

        super().__init__(message, {"node_name": node_name, "reason": reason, **details})
        self.node_name = node_name
        self.reason = reason


class ConfigurationError(DeviceFitError):
    """Raised when configuration is invalid or inconsistent."""

    def __init__(self, field: str, value: Any, expected: str, **details):
        message = f"Invalid configuration for {field}: got {value}, expected {expected}"

        super().__init__(message, {"field": field, "value": value, "expected": expected, **details})
        self.field = field
        self.value = value
        self.expected = expected


class ValidationError(DeviceFitError):
    """Raised when input data validation fails."""

    def __init__(self, field: str, value: Any, constraint: str, **details):
        message = f"Validation failed for {field}: {value} violates constraint '{constraint}'"

        super().__init__(
            message, {"field": field, "value": value, "constraint": constraint, **details}
        )
        self.field = field
        self.value = value
        self.constraint = constraint


# Convenience functions for common error patterns


def raise_configuration_error(field: str, value: Any, expected: str, **details):
    """Raise a configuration error with a hint for the matching environment variable."""
    suggestions = {
        "count_weight": "Set DEVICEFIT_COUNT_WEIGHT to a positive integer",
        "memory_weight": "Set DEVICEFIT_MEMORY_WEIGHT to a positive integer",
        "clock_weight": "Set DEVICEFIT_CLOCK_WEIGHT to a positive integer",
        "score_scale": "Set DEVICEFIT_SCORE_SCALE to a positive integer",
        "output_max": "Set DEVICEFIT_OUTPUT_MAX to a positive integer",
        "zero_count_policy": "Set DEVICEFIT_ZERO_COUNT_POLICY to match_first_device or reject",
        "max_parallelism": "Set DEVICEFIT_MAX_PARALLELISM to 1 or more",
    }

    suggestion = suggestions.get(field.lower())
    if suggestion:
        details["suggestion"] = suggestion

    raise ConfigurationError(field, value, expected, **details)
