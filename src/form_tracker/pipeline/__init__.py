"""Frame-by-frame coaching orchestration."""

from form_tracker.pipeline.coach import CoachedFrame, WorkoutCoach

__all__ = ["WorkoutCoach", "CoachedFrame"]
