"""Per-frame coaching loop orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import numpy as np

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.analysis.session import SessionSummary, SessionTracker, SetResult
from form_tracker.core.config import Settings, get_settings
from form_tracker.core.exceptions import SessionError
from form_tracker.core.logging import get_logger
from form_tracker.core.types import AnalysisResult, ExerciseType, LandmarkFrame
from form_tracker.exercises.registry import create_analyzer, resolve_exercise

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


@dataclass
class CoachedFrame:
    """Result of coaching a single frame."""

    frame: LandmarkFrame
    result: AnalysisResult
    rep_completed: bool
    set_result: SetResult | None = None


class WorkoutCoach:
    """Drives the active analyzer and the session aggregator.

    Coordinates:
    - Exercise selection (one analyzer instance at a time)
    - Per-frame analysis
    - Session recording and set completion
    """

    def __init__(
        self,
        settings: Settings | None = None,
        exercise: ExerciseType | str = ExerciseType.SQUAT,
    ) -> None:
        """Initialize coach with settings.

        Args:
            settings: Application settings (uses defaults if None)
            exercise: Initially selected exercise
        """
        self.settings = settings or get_settings()
        self._analyzer: ExerciseAnalyzer = create_analyzer(exercise)
        self._session = SessionTracker(self.settings.session)
        self._last_count = 0

    @property
    def exercise_type(self) -> ExerciseType:
        """Currently selected exercise."""
        return self._analyzer.exercise_type

    @property
    def analyzer(self) -> ExerciseAnalyzer:
        """Analyzer receiving frames."""
        return self._analyzer

    @property
    def session(self) -> SessionTracker:
        """Session aggregator."""
        return self._session

    @property
    def is_session_active(self) -> bool:
        """Check if a session is being recorded."""
        return self._session.is_active

    def select_exercise(self, exercise: ExerciseType | str) -> None:
        """Switch to another exercise with a fresh analyzer.

        Args:
            exercise: Exercise enum member or its string value

        Raises:
            UnknownExerciseError: If the exercise is not registered
            SessionError: If a session is running
        """
        exercise_type = resolve_exercise(exercise)
        if exercise_type == self.exercise_type:
            return
        if self._session.is_active:
            raise SessionError("Cannot switch exercise during a session")

        logger.debug("Exercise switched: %s -> %s", self.exercise_type.value, exercise_type.value)
        self._analyzer = create_analyzer(exercise_type)
        self._last_count = 0

    def start_session(self, now: datetime | None = None) -> SessionSummary:
        """Reset the analyzer and open a session for the selected exercise.

        Raises:
            SessionError: If a session is already running
        """
        if self._session.is_active:
            raise SessionError("Session already started")

        self.reset()
        return self._session.start(self.exercise_type, now)

    def end_session(self, now: datetime | None = None) -> SessionSummary:
        """Close the running session and return its summary."""
        return self._session.finish(now)

    def reset(self) -> None:
        """Return the analyzer to its initial state."""
        self._analyzer.reset()
        self._last_count = 0

    def process(self, frame: LandmarkFrame, now: datetime | None = None) -> CoachedFrame:
        """Analyze one frame and record it if a session is running.

        Args:
            frame: Landmarks for the current instant
            now: Wall-clock time for the session record

        Returns:
            CoachedFrame with the analysis and any completed set
        """
        result = self._analyzer.analyze(frame)

        count = self._analyzer.count
        rep_completed = count > self._last_count
        if rep_completed:
            logger.debug(
                "%s count %d at frame %d", self.exercise_type.value, count, frame.frame_idx
            )
        self._last_count = count

        set_result = None
        if self._session.is_active:
            set_result = self._session.record(result, now)

        return CoachedFrame(
            frame=frame,
            result=result,
            rep_completed=rep_completed,
            set_result=set_result,
        )

    def process_array(
        self,
        array: NDArray[np.floating[Any]],
        timestamp: float = 0.0,
        frame_idx: int = 0,
        now: datetime | None = None,
    ) -> CoachedFrame:
        """Analyze a raw (33, 3|4) landmark array.

        Raises:
            InvalidFrameError: If the array shape is not supported
        """
        frame = LandmarkFrame.from_array(array, timestamp=timestamp, frame_idx=frame_idx)
        return self.process(frame, now)
