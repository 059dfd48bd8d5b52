# src/shlfcore/exceptions.py
"""
Custom exceptions for the shlfcore library.

This module defines a hierarchy of custom exception classes to provide
more specific error information and allow for targeted error handling
by applications embedding the goal tracking and gamification core.
"""

class ShlfCoreError(Exception):
    """Base class for all shlfcore specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in shlfcore."):
        super().__init__(message)

class ConfigError(ShlfCoreError):
    """Raised for errors related to configuration loading or validation."""
    def __init__(self, message: str = "Configuration error."):
        super().__init__(message)

class GoalValidationError(ShlfCoreError):
    """Base class for rejected goal creations and edits. The goal is left untouched."""
    def __init__(self, message: str = "Goal validation error."):
        super().__init__(message)

class InvalidTargetError(GoalValidationError):
    """Raised when a goal target is below the minimum of 1."""
    def __init__(self, target_value: int = 0, message: str = "Goal target must be at least 1."):
        self.target_value = target_value
        super().__init__(f"{message} Got: {target_value}")

class InvalidDateRangeError(GoalValidationError):
    """Raised when a goal window ends before it starts, or a custom end date lies in the past."""
    def __init__(self, start: object = None, end: object = None, message: str = "Invalid goal date range."):
        self.start = start
        self.end = end
        super().__init__(f"{message} Start: {start}, End: {end}")

class InvalidProgressError(GoalValidationError):
    """Raised when a manually entered progress value is negative."""
    def __init__(self, value: int = 0, message: str = "Goal progress cannot be negative."):
        self.value = value
        super().__init__(f"{message} Got: {value}")

class UnavailableGoalTypeError(GoalValidationError):
    """Raised when a goal type is not currently offered (e.g. streak goals while streaks are paused)."""
    def __init__(self, goal_type: str = "Unknown", message: str = "Goal type is not available."):
        self.goal_type = goal_type
        super().__init__(f"{message} Type: '{goal_type}'")

class GoalNotFoundError(ShlfCoreError):
    """Raised when a goal ID is not owned by the given profile."""
    def __init__(self, goal_id: str, message: str = "Goal not found."):
        self.goal_id = goal_id
        super().__init__(f"{message} Goal ID: '{goal_id}'")

class StorageError(ShlfCoreError):
    """Base class for errors related to storage operations."""
    def __init__(self, message: str = "Storage error."):
        super().__init__(message)

class ProfileStorageError(StorageError):
    """Raised when a stored profile cannot be read or decoded."""
    def __init__(self, message: str = "Profile storage error."):
        super().__init__(message)

class UnknownVariantError(StorageError):
    """
    Raised when a stored enum discriminant does not name a known variant.
    Decoding never falls back to a default variant.
    """
    def __init__(self, enum_name: str = "Unknown", value: object = None, message: str = "Unknown variant."):
        self.enum_name = enum_name
        self.value = value
        super().__init__(f"{message} {enum_name}: {value!r}")
