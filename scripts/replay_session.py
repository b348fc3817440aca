#!/usr/bin/env python3
"""Replay recorded pose landmarks through the coaching loop.

Reads a ``.npy`` array of shape (frames, 33, 3|4) holding normalized
x, y, z[, visibility] per landmark and prints the session summary.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
from form_tracker.core.config import get_settings
from form_tracker.core.exceptions import FormTrackerError
from form_tracker.core.logging import get_logger, setup_logging_from_settings
from form_tracker.core.types import ExerciseType
from form_tracker.pipeline.coach import WorkoutCoach

logger = get_logger(__name__)


def replay(
    coach: WorkoutCoach,
    landmarks: np.ndarray,
    fps: float = 30.0,
    verbose: bool = False,
) -> dict:
    """Feed every recorded frame through the coach.

    Args:
        coach: Coach with the exercise already selected
        landmarks: Array of shape (frames, 33, 3|4)
        fps: Capture frame rate used to derive timestamps
        verbose: Print per-frame feedback

    Returns:
        Session summary as a dictionary
    """
    started = datetime.now()
    coach.start_session(now=started)

    for idx, frame_array in enumerate(landmarks):
        timestamp = idx / fps
        coached = coach.process_array(
            frame_array,
            timestamp=timestamp,
            frame_idx=idx,
            now=started + timedelta(seconds=timestamp),
        )
        if verbose:
            result = coached.result
            print(
                f"{idx:5d} count={result.current_count:3d} "
                f"ok={int(result.is_correct_form)} conf={result.confidence:.2f} "
                f"{result.feedback}"
            )
        if coached.set_result is not None:
            logger.info("Set %d finished at frame %d", coached.set_result.set_number, idx)

    duration = len(landmarks) / fps
    summary = coach.end_session(now=started + timedelta(seconds=duration))
    return summary.to_dict()


def main() -> int:
    """Run replay script."""
    parser = argparse.ArgumentParser(description="Replay recorded landmarks through an analyzer")
    parser.add_argument("input", type=Path, help="Path to a .npy landmark recording")
    parser.add_argument(
        "--exercise",
        "-e",
        default=ExerciseType.SQUAT.value,
        choices=[e.value for e in ExerciseType],
        help="Exercise to analyze (default: squat)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Recording frame rate (default: 30)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print per-frame results",
    )

    args = parser.parse_args()

    settings = get_settings()
    setup_logging_from_settings(settings.logging)

    if args.fps <= 0:
        logger.error("Frame rate must be positive")
        return 1

    try:
        landmarks = np.load(args.input)
    except (OSError, ValueError) as e:
        logger.error("Could not load %s: %s", args.input, e)
        return 1

    if landmarks.ndim != 3:
        logger.error("Expected array of shape (frames, 33, 3|4), got %s", landmarks.shape)
        return 1

    coach = WorkoutCoach(settings, exercise=args.exercise)
    try:
        summary = replay(coach, landmarks, fps=args.fps, verbose=args.verbose)
    except FormTrackerError as e:
        logger.error("Replay failed: %s", e.message)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
