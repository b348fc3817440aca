"""Debounced threshold crossing shared by the rep-counting analyzers.

A rep is one round trip ``rest_phase -> active_phase -> rest_phase``. The
outbound crossing is free; the return crossing is the one that counts and is
gated by a cooldown so jittery frames near the threshold count once.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CycleState:
    """Mutable phase/count state owned by exactly one analyzer.

    Attributes:
        phase: Current position in the movement cycle
        count: Accepted repetitions (never decreases)
        last_count_ms: Frame time of the last accepted repetition
    """

    phase: str = "up"
    count: int = 0
    last_count_ms: float | None = None


def cooldown_elapsed(state: CycleState, now_ms: float, cooldown_ms: float) -> bool:
    """Check whether another repetition may be accepted at ``now_ms``."""
    if state.last_count_ms is None:
        return True
    return now_ms - state.last_count_ms >= cooldown_ms


def register_count(state: CycleState, now_ms: float) -> None:
    """Accept one repetition."""
    state.count += 1
    state.last_count_ms = now_ms


def advance_cycle(
    state: CycleState,
    *,
    enter: bool,
    complete: bool,
    rest_phase: str,
    active_phase: str,
    now_ms: float,
    cooldown_ms: float,
) -> bool:
    """Apply one frame of a two-phase transition table.

    Transitions:
        rest_phase -> active_phase: ``enter`` is true
        active_phase -> rest_phase: ``complete`` is true and the cooldown elapsed
        (counts one repetition)

    Any other combination leaves the state untouched. A completion blocked
    by the cooldown keeps ``active_phase`` so a later frame can still count.

    Returns:
        True if a repetition was counted on this frame
    """
    if state.phase == rest_phase and enter:
        state.phase = active_phase
        return False

    if state.phase == active_phase and complete:
        if not cooldown_elapsed(state, now_ms, cooldown_ms):
            return False
        state.phase = rest_phase
        register_count(state, now_ms)
        return True

    return False


@dataclass
class HoldState(CycleState):
    """State for timed holds.

    ``count`` holds completed time buckets and never decreases; ``banked`` is
    the bucket total carried over from earlier, broken holds.
    """

    phase: str = "setup"
    hold_start_ms: float | None = None
    hold_seconds: int = 0
    banked: int = 0
    stable_frames: int = 0

    def hold(self, now_ms: float, bucket_seconds: int) -> None:
        """Extend the running hold to ``now_ms``."""
        if self.hold_start_ms is None:
            self.hold_start_ms = now_ms
        self.hold_seconds = int((now_ms - self.hold_start_ms) // 1000)
        self.count = max(self.count, self.banked + self.hold_seconds // bucket_seconds)
        self.phase = "holding"

    def release(self) -> None:
        """End the running hold, keeping the buckets it earned."""
        self.banked = self.count
        self.hold_start_ms = None
        self.hold_seconds = 0
        self.stable_frames = 0
        self.phase = "setup"
