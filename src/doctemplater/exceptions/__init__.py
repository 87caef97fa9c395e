"""
doctemplater exception classes.

This package provides all exception types used throughout doctemplater for
consistent error handling and reporting.
"""

from doctemplater.exceptions.core import (
    DirectiveEvaluationError,
    DirectiveSyntaxError,
    DocTemplaterError,
    ErrorContext,
    MalformedDocumentError,
    PackageError,
    TemplateStateError,
    UndefinedFunctionError,
)

__all__ = [
    "DocTemplaterError",
    "ErrorContext",
    "DirectiveSyntaxError",
    "UndefinedFunctionError",
    "DirectiveEvaluationError",
    "MalformedDocumentError",
    "PackageError",
    "TemplateStateError",
]
