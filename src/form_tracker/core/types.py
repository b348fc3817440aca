"""Core data types and structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

import numpy as np
from numpy.typing import NDArray

from form_tracker.core.exceptions import InvalidFrameError

LANDMARK_COUNT = 33


@dataclass(frozen=True, slots=True)
class Point:
    """A normalized 2D/3D position."""

    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True, slots=True)
class Landmark:
    """A single body landmark with coordinates and visibility score.

    Coordinates are normalized [0, 1] relative to frame dimensions.
    """

    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0

    @property
    def point(self) -> Point:
        """Position without the visibility score."""
        return Point(self.x, self.y, self.z)

    def is_visible(self, threshold: float) -> bool:
        """Check visibility strictly above a threshold."""
        return self.visibility > threshold


class LandmarkIndex(IntEnum):
    """MediaPipe pose landmark indices (all 33 slots)."""

    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True, slots=True)
class LandmarkFrame:
    """All 33 body landmarks for a single instant.

    Attributes:
        landmarks: Landmarks ordered by LandmarkIndex slot
        timestamp: Frame timestamp in seconds
        frame_idx: Frame sequence number
    """

    landmarks: tuple[Landmark, ...]
    timestamp: float = 0.0
    frame_idx: int = 0

    def __post_init__(self) -> None:
        if len(self.landmarks) != LANDMARK_COUNT:
            raise InvalidFrameError(
                f"Expected {LANDMARK_COUNT} landmarks, got {len(self.landmarks)}"
            )

    @property
    def timestamp_ms(self) -> float:
        """Frame timestamp in milliseconds."""
        return self.timestamp * 1000.0

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get a specific landmark by its enum index."""
        return self.landmarks[index]

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]

    @classmethod
    def from_array(
        cls,
        array: NDArray[np.floating[Any]],
        timestamp: float = 0.0,
        frame_idx: int = 0,
    ) -> LandmarkFrame:
        """Build a frame from a (33, 3) or (33, 4) array of x, y, z[, visibility].

        Rows without a visibility column are treated as fully visible. NaN
        visibility is read as 0.

        Raises:
            InvalidFrameError: If the array shape is not supported
        """
        data = np.asarray(array, dtype=np.float64)
        if data.ndim != 2 or data.shape[0] != LANDMARK_COUNT or data.shape[1] not in (3, 4):
            raise InvalidFrameError(f"Expected array of shape (33, 3|4), got {data.shape}")

        if data.shape[1] == 3:
            visibility = np.ones(LANDMARK_COUNT, dtype=np.float64)
        else:
            visibility = np.nan_to_num(data[:, 3], nan=0.0)
        visibility = np.clip(visibility, 0.0, 1.0)

        landmarks = tuple(
            Landmark(
                x=float(row[0]),
                y=float(row[1]),
                z=float(row[2]),
                visibility=float(vis),
            )
            for row, vis in zip(data, visibility)
        )
        return cls(landmarks=landmarks, timestamp=timestamp, frame_idx=frame_idx)

    def to_array(self) -> NDArray[np.float64]:
        """Convert to a (33, 4) array of x, y, z, visibility."""
        return np.array(
            [(lm.x, lm.y, lm.z, lm.visibility) for lm in self.landmarks],
            dtype=np.float64,
        )


class ExerciseType(str, Enum):
    """Exercises with a dedicated analyzer."""

    SQUAT = "squat"
    LUNGE = "lunge"
    PUSHUP = "pushup"
    PULLUP = "pullup"
    CALF_RAISE = "calf_raise"
    JUMP_SQUAT = "jump_squat"
    DEADLIFT = "deadlift"
    WALL_SIT = "wall_sit"
    BRIDGE = "bridge"
    PLANK = "plank"
    SIDE_PLANK = "side_plank"
    SITUP = "situp"
    CRUNCH = "crunch"
    BURPEE = "burpee"
    MOUNTAIN_CLIMBER = "mountain_climber"
    JUMPING_JACK = "jumping_jack"
    HIGH_KNEES = "high_knees"


class ExerciseCategory(str, Enum):
    """Body region grouping used by the caller's exercise picker."""

    LOWER_BODY = "lower_body"
    UPPER_BODY = "upper_body"
    CORE = "core"
    CARDIO = "cardio"


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Per-frame analysis outcome. Built fresh every frame.

    Attributes:
        exercise_type: Exercise the analyzer is tracking
        current_count: Completed repetitions (held seconds for timed holds)
        is_correct_form: Whether the frame falls in the good-form range
        feedback: Coaching text for the athlete
        confidence: Trust in this frame's analysis [0, 1]
    """

    exercise_type: ExerciseType
    current_count: int
    is_correct_form: bool
    feedback: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        """Outbound representation for the UI layer."""
        return {
            "exerciseType": self.exercise_type.value,
            "currentCount": self.current_count,
            "isCorrectForm": self.is_correct_form,
            "feedback": self.feedback,
            "confidence": self.confidence,
        }
