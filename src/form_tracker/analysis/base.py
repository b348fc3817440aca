"""Analyzer contract shared by every exercise.

This module is pure logic with NO I/O. Low visibility is the expected steady
state whenever the athlete is partly out of frame, so it is answered with a
zero-confidence coaching result instead of an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import ClassVar, Generic, TypeVar

from form_tracker.analysis.debounce import CycleState
from form_tracker.core.logging import get_logger
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    Landmark,
    LandmarkFrame,
    LandmarkIndex,
)

logger = get_logger(__name__)

StateT = TypeVar("StateT", bound=CycleState)

SETUP_GUIDANCE = "Get into the starting position and move through the full range"


class ExerciseAnalyzer(ABC, Generic[StateT]):
    """Base class for per-exercise analyzers.

    Subclasses declare their identity and calibration as class attributes and
    implement ``analyze``. All mutable state lives in one dataclass
    (``self.state``) that only this instance touches.
    """

    exercise_type: ClassVar[ExerciseType]
    category: ClassVar[ExerciseCategory]
    visibility_floor: ClassVar[float] = 0.3
    cooldown_ms: ClassVar[float] = 0.0

    def __init__(self) -> None:
        self._state: StateT = self._initial_state()

    @abstractmethod
    def _initial_state(self) -> StateT:
        """Fresh state as of construction or ``reset()``."""

    @abstractmethod
    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        """Analyze one frame and advance the carried-forward state.

        Args:
            frame: Landmarks for the current instant

        Returns:
            AnalysisResult for this frame
        """

    @property
    def state(self) -> StateT:
        """Current mutable state."""
        return self._state

    @property
    def phase(self) -> str:
        """Current movement phase."""
        return self._state.phase

    @property
    def count(self) -> int:
        """Accepted repetitions so far."""
        return self._state.count

    def reset(self) -> None:
        """Return phase and count to initial values and drop accumulators."""
        self._state = self._initial_state()

    def validate_landmarks(
        self,
        landmarks: Iterable[Landmark | None],
        threshold: float | None = None,
    ) -> bool:
        """Check every landmark is present and above the visibility floor.

        Args:
            landmarks: Landmarks the computation depends on
            threshold: Visibility floor (defaults to the analyzer's floor)

        Returns:
            True only if all landmarks are usable
        """
        floor = self.visibility_floor if threshold is None else threshold
        return all(lm is not None and lm.is_visible(floor) for lm in landmarks)

    @staticmethod
    def calculate_confidence(landmarks: Sequence[Landmark]) -> float:
        """Minimum visibility among the landmarks consulted."""
        if not landmarks:
            return 0.0
        return min(lm.visibility for lm in landmarks)

    @staticmethod
    def is_visible(frame: LandmarkFrame, index: LandmarkIndex, threshold: float) -> bool:
        """Visibility check for one landmark slot."""
        return frame.get(index).is_visible(threshold)

    def head_visible(self, frame: LandmarkFrame, nose: float = 0.3, eyes: float = 0.25) -> bool:
        """Nose plus at least one eye, the full-body framing check."""
        return self.is_visible(frame, LandmarkIndex.NOSE, nose) and (
            self.is_visible(frame, LandmarkIndex.LEFT_EYE, eyes)
            or self.is_visible(frame, LandmarkIndex.RIGHT_EYE, eyes)
        )

    def _reported_count(self) -> int:
        """Outbound ``current_count``; accepted repetitions unless overridden."""
        return self._state.count

    def error_analysis(self, message: str) -> AnalysisResult:
        """Result for a frame that cannot be analyzed.

        Args:
            message: Re-framing instruction for the athlete

        Returns:
            Zero-confidence result carrying the unchanged count
        """
        logger.debug("%s: %s", self.exercise_type.value, message)
        return AnalysisResult(
            exercise_type=self.exercise_type,
            current_count=self._reported_count(),
            is_correct_form=False,
            feedback=message,
            confidence=0.0,
        )

    def make_result(
        self,
        *,
        is_correct_form: bool,
        feedback: str,
        confidence: float,
    ) -> AnalysisResult:
        """Assemble a result, clamping confidence into [0, 1]."""
        return AnalysisResult(
            exercise_type=self.exercise_type,
            current_count=self._reported_count(),
            is_correct_form=is_correct_form,
            feedback=feedback,
            confidence=max(0.0, min(1.0, confidence)),
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(phase={self._state.phase!r}, count={self._state.count})"
        )
