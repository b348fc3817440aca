"""Custom exceptions for Form Tracker.

Low landmark visibility is never an exception: analyzers answer it with a
zero-confidence coaching result. These types only signal caller contract
violations.
"""


class FormTrackerError(Exception):
    """Base exception for all Form Tracker errors."""

    pass


class InvalidFrameError(FormTrackerError):
    """Landmark frame has the wrong cardinality or array shape."""

    def __init__(self, message: str = "Invalid landmark frame") -> None:
        self.message = message
        super().__init__(self.message)


class UnknownExerciseError(FormTrackerError):
    """No analyzer is registered for the requested exercise."""

    def __init__(self, message: str = "Unknown exercise") -> None:
        self.message = message
        super().__init__(self.message)


class SessionError(FormTrackerError):
    """Session lifecycle used out of order (finish before start, double start)."""

    def __init__(self, message: str = "Invalid session state") -> None:
        self.message = message
        super().__init__(self.message)
