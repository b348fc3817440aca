"""Exercise type to analyzer lookup."""

from __future__ import annotations

from collections.abc import Iterable

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.core.exceptions import UnknownExerciseError
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    LandmarkFrame,
)
from form_tracker.exercises.cardio import (
    BurpeeAnalyzer,
    HighKneesAnalyzer,
    JumpingJackAnalyzer,
    MountainClimberAnalyzer,
)
from form_tracker.exercises.core_body import (
    CrunchAnalyzer,
    PlankAnalyzer,
    SidePlankAnalyzer,
    SitupAnalyzer,
)
from form_tracker.exercises.lower_body import (
    BridgeAnalyzer,
    CalfRaiseAnalyzer,
    DeadliftAnalyzer,
    JumpSquatAnalyzer,
    LungeAnalyzer,
    SquatAnalyzer,
    WallSitAnalyzer,
)
from form_tracker.exercises.upper_body import PullupAnalyzer, PushupAnalyzer

ANALYZERS: dict[ExerciseType, type[ExerciseAnalyzer]] = {
    cls.exercise_type: cls
    for cls in (
        SquatAnalyzer,
        LungeAnalyzer,
        PushupAnalyzer,
        PullupAnalyzer,
        CalfRaiseAnalyzer,
        JumpSquatAnalyzer,
        DeadliftAnalyzer,
        WallSitAnalyzer,
        BridgeAnalyzer,
        PlankAnalyzer,
        SidePlankAnalyzer,
        SitupAnalyzer,
        CrunchAnalyzer,
        BurpeeAnalyzer,
        MountainClimberAnalyzer,
        JumpingJackAnalyzer,
        HighKneesAnalyzer,
    )
}


def resolve_exercise(exercise: ExerciseType | str) -> ExerciseType:
    """Normalize an exercise name or enum member.

    Raises:
        UnknownExerciseError: If the name matches no exercise
    """
    if isinstance(exercise, ExerciseType):
        return exercise
    try:
        return ExerciseType(exercise.strip().lower())
    except ValueError:
        raise UnknownExerciseError(f"Unknown exercise: {exercise!r}") from None


def create_analyzer(exercise: ExerciseType | str) -> ExerciseAnalyzer:
    """Build a fresh analyzer for an exercise.

    Args:
        exercise: Exercise enum member or its string value

    Returns:
        New analyzer instance in its initial state

    Raises:
        UnknownExerciseError: If no analyzer is registered for the exercise
    """
    exercise_type = resolve_exercise(exercise)
    try:
        return ANALYZERS[exercise_type]()
    except KeyError:
        raise UnknownExerciseError(f"No analyzer for {exercise_type.value}") from None


def analyzers_by_category() -> dict[ExerciseCategory, list[ExerciseType]]:
    """Group registered exercises by body region."""
    grouped: dict[ExerciseCategory, list[ExerciseType]] = {c: [] for c in ExerciseCategory}
    for exercise_type, cls in ANALYZERS.items():
        grouped[cls.category].append(exercise_type)
    return grouped


def analyze_sequence(
    exercise: ExerciseType | str,
    frames: Iterable[LandmarkFrame],
) -> list[AnalysisResult]:
    """Run a fresh analyzer over a frame sequence.

    Args:
        exercise: Exercise to analyze
        frames: Frames in capture order

    Returns:
        One result per frame
    """
    analyzer = create_analyzer(exercise)
    return [analyzer.analyze(frame) for frame in frames]
