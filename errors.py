"""
errors.py
Typed failures for the core. Every error carries a code and a category from the
taxonomy below; callers turn them into notifications or result objects.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not-found"
    REMOTE_FAILURE = "remote-failure"
    CONNECTIVITY = "connectivity"
    SCHEMA = "schema"


class StudyRoomError(Exception):
    """Base class; `message` is safe to show to the operator."""

    def __init__(self, message: str, code: str, category: ErrorCategory):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category


class ValidationError(StudyRoomError):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "VALIDATION_ERROR", ErrorCategory.VALIDATION)
        self.field = field


class ConfigurationError(StudyRoomError):
    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION)


class RecordNotFoundError(StudyRoomError):
    def __init__(self, record_type: str, record_id: str):
        super().__init__(f"{record_type} '{record_id}' bulunamadı.", "RECORD_NOT_FOUND", ErrorCategory.NOT_FOUND)
        self.record_type = record_type
        self.record_id = record_id


class RemoteFailureError(StudyRoomError):
    """The gateway answered with an error code."""

    def __init__(self, message: str, remote_code: str):
        super().__init__(message, "REMOTE_FAILURE", ErrorCategory.REMOTE_FAILURE)
        self.remote_code = remote_code


class ConnectivityError(StudyRoomError):
    def __init__(self, message: str):
        super().__init__(message, "CONNECTIVITY_ERROR", ErrorCategory.CONNECTIVITY)


class SchemaError(StudyRoomError):
    def __init__(self, message: str):
        super().__init__(message, "SCHEMA_ERROR", ErrorCategory.SCHEMA)
