"""Synthetic landmark frames for analyzer tests.

Positions are normalized image coordinates (Y grows downward). The neutral
skeleton is a person standing upright facing the camera.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping

from form_tracker.core.types import Landmark, LandmarkFrame, LandmarkIndex

L = LandmarkIndex

VISIBLE = 0.9

Position = tuple[float, float]

NEUTRAL_POSITIONS: dict[LandmarkIndex, Position] = {
    L.NOSE: (0.5, 0.1),
    L.LEFT_EYE_INNER: (0.49, 0.09),
    L.LEFT_EYE: (0.48, 0.09),
    L.LEFT_EYE_OUTER: (0.47, 0.09),
    L.RIGHT_EYE_INNER: (0.51, 0.09),
    L.RIGHT_EYE: (0.52, 0.09),
    L.RIGHT_EYE_OUTER: (0.53, 0.09),
    L.LEFT_EAR: (0.46, 0.1),
    L.RIGHT_EAR: (0.54, 0.1),
    L.MOUTH_LEFT: (0.49, 0.12),
    L.MOUTH_RIGHT: (0.51, 0.12),
    L.LEFT_SHOULDER: (0.4, 0.25),
    L.RIGHT_SHOULDER: (0.6, 0.25),
    L.LEFT_ELBOW: (0.4, 0.4),
    L.RIGHT_ELBOW: (0.6, 0.4),
    L.LEFT_WRIST: (0.4, 0.52),
    L.RIGHT_WRIST: (0.6, 0.52),
    L.LEFT_PINKY: (0.4, 0.55),
    L.RIGHT_PINKY: (0.6, 0.55),
    L.LEFT_INDEX: (0.4, 0.55),
    L.RIGHT_INDEX: (0.6, 0.55),
    L.LEFT_THUMB: (0.41, 0.54),
    L.RIGHT_THUMB: (0.59, 0.54),
    L.LEFT_HIP: (0.45, 0.5),
    L.RIGHT_HIP: (0.55, 0.5),
    L.LEFT_KNEE: (0.45, 0.7),
    L.RIGHT_KNEE: (0.55, 0.7),
    L.LEFT_ANKLE: (0.45, 0.9),
    L.RIGHT_ANKLE: (0.55, 0.9),
    L.LEFT_HEEL: (0.44, 0.91),
    L.RIGHT_HEEL: (0.56, 0.91),
    L.LEFT_FOOT_INDEX: (0.47, 0.905),
    L.RIGHT_FOOT_INDEX: (0.53, 0.905),
}


def build_frame(
    positions: Mapping[LandmarkIndex, Position] | None = None,
    visibility: Mapping[LandmarkIndex, float] | None = None,
    timestamp: float = 0.0,
    frame_idx: int = 0,
    shift_y: float = 0.0,
) -> LandmarkFrame:
    """Neutral skeleton with selected landmarks moved or hidden.

    Args:
        positions: Overrides for landmark positions
        visibility: Overrides for landmark visibility (default 0.9)
        timestamp: Frame time in seconds
        frame_idx: Frame sequence number
        shift_y: Offset added to every Y coordinate
    """
    placed = dict(NEUTRAL_POSITIONS)
    placed.update(positions or {})
    vis = visibility or {}

    landmarks = tuple(
        Landmark(
            x=placed[idx][0],
            y=placed[idx][1] + shift_y,
            z=0.0,
            visibility=vis.get(idx, VISIBLE),
        )
        for idx in L
    )
    return LandmarkFrame(landmarks=landmarks, timestamp=timestamp, frame_idx=frame_idx)


def place_joint(end: Position, vertex: Position, angle_deg: float, length: float) -> Position:
    """Position a point so the angle end-vertex-point equals ``angle_deg``."""
    base = math.atan2(end[1] - vertex[1], end[0] - vertex[0])
    theta = base + math.radians(angle_deg)
    return (vertex[0] + length * math.cos(theta), vertex[1] + length * math.sin(theta))


def leg_positions(side: str, knee_angle: float) -> dict[LandmarkIndex, Position]:
    """Hip-knee-ankle of one leg bent to ``knee_angle``, hip fixed."""
    hip_idx, knee_idx, ankle_idx = (
        (L.LEFT_HIP, L.LEFT_KNEE, L.LEFT_ANKLE)
        if side == "left"
        else (L.RIGHT_HIP, L.RIGHT_KNEE, L.RIGHT_ANKLE)
    )
    hip = NEUTRAL_POSITIONS[hip_idx]
    knee = NEUTRAL_POSITIONS[knee_idx]
    return {
        hip_idx: hip,
        knee_idx: knee,
        ankle_idx: place_joint(hip, knee, knee_angle, 0.2),
    }


def squat_positions(knee_angle: float) -> dict[LandmarkIndex, Position]:
    """Both legs bent to the same knee angle."""
    return {**leg_positions("left", knee_angle), **leg_positions("right", knee_angle)}


def arm_positions(elbow_angle: float) -> dict[LandmarkIndex, Position]:
    """Both arms bent to the same elbow angle, upper arms hanging."""
    positions: dict[LandmarkIndex, Position] = {}
    for shoulder_idx, elbow_idx, wrist_idx in (
        (L.LEFT_SHOULDER, L.LEFT_ELBOW, L.LEFT_WRIST),
        (L.RIGHT_SHOULDER, L.RIGHT_ELBOW, L.RIGHT_WRIST),
    ):
        shoulder = NEUTRAL_POSITIONS[shoulder_idx]
        elbow = NEUTRAL_POSITIONS[elbow_idx]
        positions[wrist_idx] = place_joint(shoulder, elbow, elbow_angle, 0.12)
    return positions


def trunk_positions(hip_angle: float) -> dict[LandmarkIndex, Position]:
    """Shoulders placed so shoulder-hip-knee equals ``hip_angle`` on both sides."""
    positions: dict[LandmarkIndex, Position] = {}
    for shoulder_idx, hip_idx, knee_idx in (
        (L.LEFT_SHOULDER, L.LEFT_HIP, L.LEFT_KNEE),
        (L.RIGHT_SHOULDER, L.RIGHT_HIP, L.RIGHT_KNEE),
    ):
        knee = NEUTRAL_POSITIONS[knee_idx]
        hip = NEUTRAL_POSITIONS[hip_idx]
        positions[shoulder_idx] = place_joint(knee, hip, hip_angle, 0.25)
    return positions


def squat_frame(
    knee_angle: float,
    timestamp: float = 0.0,
    frame_idx: int = 0,
    visibility: Mapping[LandmarkIndex, float] | None = None,
) -> LandmarkFrame:
    """Neutral skeleton with both knees at ``knee_angle``."""
    return build_frame(
        squat_positions(knee_angle),
        visibility=visibility,
        timestamp=timestamp,
        frame_idx=frame_idx,
    )


def frame_sequence(
    builder: Callable[..., LandmarkFrame],
    values: Iterable[float],
    step_s: float = 0.1,
    start_s: float = 0.0,
) -> list[LandmarkFrame]:
    """Frames for successive metric values at a fixed time step."""
    return [
        builder(value, timestamp=start_s + i * step_s, frame_idx=i)
        for i, value in enumerate(values)
    ]
