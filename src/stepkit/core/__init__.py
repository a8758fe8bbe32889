"""
Stepkit core — errors, outcomes, logging and settings.

Modules:
    errors.py    ─ StepkitError hierarchy and the Failure signal
    result.py    ─ Ok / Failed tagged outcomes and capture()
    logging.py   ─ structlog configuration and get_logger()
    settings.py  ─ STEPKIT_* environment settings
"""

from stepkit.core.errors import (
    ErrorCategory,
    ErrorContext,
    Failure,
    InvalidFieldNameError,
    MissingFieldsError,
    SchemaConflictError,
    SchemaError,
    StepkitError,
)
from stepkit.core.logging import configure_logging, get_logger
from stepkit.core.settings import StepkitSettings, get_settings

__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "Failure",
    "InvalidFieldNameError",
    "MissingFieldsError",
    "SchemaConflictError",
    "SchemaError",
    "StepkitError",
    "configure_logging",
    "get_logger",
    "StepkitSettings",
    "get_settings",
]
