"""Core infrastructure: config, types, exceptions, and logging."""

from form_tracker.core.config import Settings, get_settings
from form_tracker.core.exceptions import (
    FormTrackerError,
    InvalidFrameError,
    SessionError,
    UnknownExerciseError,
)
from form_tracker.core.logging import get_logger, setup_logging
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    Landmark,
    LandmarkFrame,
    LandmarkIndex,
    Point,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "Point",
    "Landmark",
    "LandmarkIndex",
    "LandmarkFrame",
    "ExerciseType",
    "ExerciseCategory",
    "AnalysisResult",
    # Exceptions
    "FormTrackerError",
    "InvalidFrameError",
    "UnknownExerciseError",
    "SessionError",
    # Logging
    "setup_logging",
    "get_logger",
]
