"""Workout session aggregation and calorie estimation.

This module is pure logic with NO I/O. The finished summary is handed to
the caller for persistence.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from form_tracker.core.config import SessionSettings
from form_tracker.core.exceptions import SessionError
from form_tracker.core.logging import get_logger
from form_tracker.core.types import AnalysisResult, ExerciseType

logger = get_logger(__name__)

# Metabolic equivalents per exercise (Compendium of Physical Activities style)
MET_VALUES: dict[ExerciseType, float] = {
    ExerciseType.SQUAT: 5.0,
    ExerciseType.PUSHUP: 3.8,
    ExerciseType.LUNGE: 4.0,
    ExerciseType.PLANK: 3.5,
    ExerciseType.CALF_RAISE: 2.8,
    ExerciseType.PULLUP: 8.0,
    ExerciseType.JUMP_SQUAT: 8.0,
    ExerciseType.DEADLIFT: 6.0,
    ExerciseType.WALL_SIT: 4.0,
    ExerciseType.BRIDGE: 3.5,
    ExerciseType.SIDE_PLANK: 3.5,
    ExerciseType.SITUP: 3.8,
    ExerciseType.CRUNCH: 3.8,
    ExerciseType.BURPEE: 8.0,
    ExerciseType.MOUNTAIN_CLIMBER: 8.0,
    ExerciseType.JUMPING_JACK: 7.7,
    ExerciseType.HIGH_KNEES: 8.0,
}
DEFAULT_MET = 4.0

MAX_INTENSITY_FACTOR = 1.3


def estimate_calories(
    exercise_type: ExerciseType,
    reps: int,
    duration_s: float,
    weight_kg: float = 70.0,
) -> int:
    """Estimate energy spent in a session.

    Args:
        exercise_type: Exercise performed
        reps: Repetitions completed
        duration_s: Session length in seconds
        weight_kg: Athlete body weight

    Returns:
        Kilocalories, rounded, never below 1
    """
    met = MET_VALUES.get(exercise_type, DEFAULT_MET)
    intensity = min(MAX_INTENSITY_FACTOR, 1.0 + reps / 100)
    calories = met * weight_kg * (duration_s / 3600) * intensity
    return round(max(1.0, calories))


@dataclass(frozen=True, slots=True)
class PerformanceSample:
    """One recorded frame of a session."""

    timestamp: datetime
    rep_count: int
    form_score: int
    confidence: float
    feedback: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "repCount": self.rep_count,
            "formScore": self.form_score,
            "confidence": self.confidence,
            "feedback": self.feedback,
        }


@dataclass(frozen=True, slots=True)
class SetResult:
    """A completed set when a per-set rep target is configured.

    Attributes:
        set_number: 1-based set index within the session
        reps: Repetitions in this set
        average_form_score: Percentage of correct-form frames in this set
        corrections: Distinct corrections issued during this set
    """

    set_number: int
    reps: int
    average_form_score: float
    corrections: tuple[str, ...]


@dataclass
class SessionSummary:
    """Outcome of one workout session."""

    exercise_type: ExerciseType
    start_time: datetime
    end_time: datetime | None = None
    total_reps: int = 0
    average_form_score: float = 0.0
    form_corrections: list[str] = field(default_factory=list)
    duration_seconds: int = 0
    estimated_calories: int = 0
    sets: list[SetResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Hand-off payload for the persistence layer."""
        return {
            "exerciseType": self.exercise_type.value,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "totalReps": self.total_reps,
            "averageFormScore": self.average_form_score,
            "formCorrections": list(self.form_corrections),
            "durationSeconds": self.duration_seconds,
            "estimatedCalories": self.estimated_calories,
        }


class SessionTracker:
    """Aggregates per-frame analysis results into a session summary.

    Keeps a bounded performance history, distinct form corrections and,
    when ``target_reps`` is configured, per-set results.
    """

    def __init__(self, settings: SessionSettings | None = None) -> None:
        """Initialize tracker with settings.

        Args:
            settings: Session parameters (uses defaults if None)
        """
        self.settings = settings or SessionSettings()
        self._summary: SessionSummary | None = None
        self._history: deque[PerformanceSample] = deque(maxlen=self.settings.history_size)
        self._set_scores: list[int] = []
        self._set_corrections: list[str] = []
        self._set_start_count = 0
        self._frames = 0
        self._correct_frames = 0

    @property
    def is_active(self) -> bool:
        """Check if a session is running."""
        return self._summary is not None

    @property
    def summary(self) -> SessionSummary | None:
        """Summary of the running session, if any."""
        return self._summary

    @property
    def history(self) -> list[PerformanceSample]:
        """Copy of the bounded performance history."""
        return list(self._history)

    @property
    def total_reps(self) -> int:
        """Highest count recorded so far."""
        return self._summary.total_reps if self._summary else 0

    def start(self, exercise_type: ExerciseType, now: datetime | None = None) -> SessionSummary:
        """Open a new session.

        Args:
            exercise_type: Exercise being performed
            now: Session start time (defaults to the current time)

        Returns:
            The freshly opened summary

        Raises:
            SessionError: If a session is already running
        """
        if self._summary is not None:
            raise SessionError("Session already started")

        self._summary = SessionSummary(
            exercise_type=exercise_type, start_time=now or datetime.now()
        )
        self._history.clear()
        self._set_scores.clear()
        self._set_corrections.clear()
        self._set_start_count = 0
        self._frames = 0
        self._correct_frames = 0

        logger.info("Session started: %s", exercise_type.value)
        return self._summary

    def record(self, result: AnalysisResult, now: datetime | None = None) -> SetResult | None:
        """Record one frame's analysis.

        Args:
            result: Analysis of the frame
            now: Frame wall-clock time (defaults to the current time)

        Returns:
            SetResult if this frame completed a set, None otherwise

        Raises:
            SessionError: If no session is running
        """
        summary = self._summary
        if summary is None:
            raise SessionError("No active session")

        form_score = 1 if result.is_correct_form else 0
        self._history.append(
            PerformanceSample(
                timestamp=now or datetime.now(),
                rep_count=result.current_count,
                form_score=form_score,
                confidence=result.confidence,
                feedback=result.feedback,
            )
        )
        self._frames += 1
        self._correct_frames += form_score
        self._set_scores.append(form_score)
        summary.total_reps = max(summary.total_reps, result.current_count)

        if not result.is_correct_form and result.feedback:
            if result.feedback not in summary.form_corrections:
                summary.form_corrections.append(result.feedback)
            if result.feedback not in self._set_corrections:
                self._set_corrections.append(result.feedback)

        target = self.settings.target_reps
        if target is not None and result.current_count - self._set_start_count >= target:
            return self._complete_set(summary, result.current_count)
        return None

    def finish(self, now: datetime | None = None) -> SessionSummary:
        """Close the running session.

        Args:
            now: Session end time (defaults to the current time)

        Returns:
            The completed summary

        Raises:
            SessionError: If no session is running
        """
        summary = self._summary
        if summary is None:
            raise SessionError("No active session to finish")

        summary.end_time = now or datetime.now()
        summary.duration_seconds = max(
            0, int((summary.end_time - summary.start_time).total_seconds())
        )
        summary.average_form_score = (
            self._correct_frames / self._frames if self._frames else 0.0
        )
        summary.estimated_calories = estimate_calories(
            summary.exercise_type,
            summary.total_reps,
            summary.duration_seconds,
            self.settings.body_weight_kg,
        )
        self._summary = None

        logger.info(
            "Session finished: %s, %d reps in %ds (form %.0f%%, ~%d kcal)",
            summary.exercise_type.value,
            summary.total_reps,
            summary.duration_seconds,
            summary.average_form_score * 100,
            summary.estimated_calories,
        )
        return summary

    def _complete_set(self, summary: SessionSummary, count: int) -> SetResult:
        scores = np.asarray(self._set_scores, dtype=np.float64)
        set_result = SetResult(
            set_number=len(summary.sets) + 1,
            reps=count - self._set_start_count,
            average_form_score=float(scores.mean() * 100) if scores.size else 0.0,
            corrections=tuple(self._set_corrections),
        )
        summary.sets.append(set_result)

        self._set_start_count = count
        self._set_scores.clear()
        self._set_corrections.clear()
        self._history.clear()

        logger.info(
            "Set %d complete: %d reps, form %.0f%%",
            set_result.set_number,
            set_result.reps,
            set_result.average_form_score,
        )
        return set_result
