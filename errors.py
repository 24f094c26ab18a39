"""
Custom exceptions - error types raised inside the habit tracker core.

Registry and lifecycle operations catch these and report a boolean or
(success, message) result instead of letting them escape.
"""


class HabitTrackerError(Exception):
    """Base exception for all habit tracker errors"""
    pass


class ValidationError(HabitTrackerError):
    """Raised when habit fields are invalid or the name is already taken"""
    pass


class NotFoundError(HabitTrackerError):
    """Raised when no habit matches the given id"""
    pass


class MalformedDataError(HabitTrackerError):
    """Raised when persisted habit data cannot be parsed"""
    pass


class ImportParseError(HabitTrackerError):
    """Raised when an import payload is not a valid habit list"""
    pass


class StorageError(HabitTrackerError):
    """Raised when the key-value backend fails to read or write"""
    pass
