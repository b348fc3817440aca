"""Pure analysis logic: geometry, analyzer contract, state machine, and sessions.

This module contains NO I/O operations.
"""

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.analysis.session import SessionTracker, estimate_calories
from form_tracker.analysis.state_machine import FrameData, MachineState, RepStateMachine

__all__ = [
    "ExerciseAnalyzer",
    "RepStateMachine",
    "MachineState",
    "FrameData",
    "SessionTracker",
    "estimate_calories",
]
