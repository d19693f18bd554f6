from typing import List

from archiver.schemas.validation import FieldError


class ArchiverError(Exception):
    """Base class for errors raised by the archiver crud layer."""


class RecordValidationError(ArchiverError):
    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        fields = ", ".join(error.field for error in errors)
        super().__init__(f"Validation failed for: {fields}")


class CategoryDeleteError(ArchiverError):
    """A category precondition blocks deletion; ``reason`` is user-facing."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class CategoryHierarchyError(ArchiverError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
