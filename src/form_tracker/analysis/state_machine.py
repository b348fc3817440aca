"""Declarative rep state machine with rep-quality scoring.

This module is pure logic with NO I/O. Dwell times come from frame
timestamps, so identical input sequences give identical results.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from form_tracker.core.config import StateMachineSettings
from form_tracker.core.logging import get_logger

logger = get_logger(__name__)


class MachineState(str, Enum):
    """States of the generalized rep cycle."""

    READY = "READY"
    CONTRACT = "CONTRACT"
    RELAX = "RELAX"
    TRANSITION = "TRANSITION"
    ERROR = "ERROR"


class RepQuality(str, Enum):
    """Score assigned to a completed rep."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass(frozen=True, slots=True)
class FrameData:
    """Per-frame input to the state machine.

    Attributes:
        metrics: Named measurements (e.g. ``{"knee_angle": 118.0}``)
        timestamp_ms: Frame time in milliseconds
        confidence: Trust in the frame's landmarks [0, 1]
        form_errors: Form problems detected on this frame
        feedback: Extra coaching text to pass through
    """

    metrics: Mapping[str, float]
    timestamp_ms: float
    confidence: float
    form_errors: tuple[str, ...] = ()
    feedback: tuple[str, ...] = ()


Condition = Callable[[FrameData], bool]
TransitionHook = Callable[[FrameData], None]


@dataclass(frozen=True, slots=True)
class Transition:
    """One edge of the transition table.

    Attributes:
        source: State the edge leaves
        target: State the edge enters
        condition: Predicate on the current frame
        min_confidence: Frame confidence required to take the edge
        min_duration_ms: Dwell time in ``source`` required to take the edge
        on_transition: Hook run after the state changes
    """

    source: MachineState
    target: MachineState
    condition: Condition
    min_confidence: float | None = None
    min_duration_ms: float | None = None
    on_transition: TransitionHook | None = None


@dataclass
class Rep:
    """A single rep from entering CONTRACT to leaving it."""

    number: int
    start_ms: float
    end_ms: float | None = None
    quality: RepQuality = RepQuality.FAIR
    feedback: list[str] = field(default_factory=list)
    form_errors: list[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> float | None:
        """Rep duration, None while the rep is still open."""
        if self.end_ms is None:
            return None
        return self.end_ms - self.start_ms


@dataclass(frozen=True, slots=True)
class HistorySample:
    """Diagnostic snapshot of one update."""

    state: MachineState
    timestamp_ms: float
    confidence: float


@dataclass(frozen=True)
class MachineResult:
    """Outcome of one ``update`` call."""

    state: MachineState
    previous_state: MachineState
    rep_count: int
    current_rep: Rep | None
    completed_reps: tuple[Rep, ...]
    state_changed: bool
    feedback: tuple[str, ...]
    confidence: float
    is_valid_transition: bool


@dataclass
class MachineRunState:
    """Mutable state of a RepStateMachine."""

    state: MachineState = MachineState.READY
    previous_state: MachineState = MachineState.READY
    resume_state: MachineState = MachineState.READY
    state_start_ms: float | None = None
    rep_count: int = 0
    current_rep: Rep | None = None
    completed_reps: list[Rep] = field(default_factory=list)


STATE_FEEDBACK = {
    MachineState.READY: "Get into your starting position",
    MachineState.CONTRACT: "Good! Hold the movement",
    MachineState.RELAX: "Return slowly to the starting position",
    MachineState.TRANSITION: "Keep moving smoothly",
    MachineState.ERROR: "Reset your position",
}

LOW_CONFIDENCE_FEEDBACK = "Adjust so your whole body is visible to the camera"
LOW_CONFIDENCE_HINT = 0.5


def assess_rep_quality(error_count: int, duration_ms: float) -> RepQuality:
    """Score a completed rep.

    Args:
        error_count: Distinct form errors seen during the rep
        duration_ms: Time spent from CONTRACT entry to exit

    Returns:
        RepQuality grade
    """
    if error_count == 0 and 1000 <= duration_ms <= 4000:
        return RepQuality.EXCELLENT
    if error_count <= 1 and duration_ms > 800:
        return RepQuality.GOOD
    if error_count <= 2:
        return RepQuality.FAIR
    return RepQuality.POOR


def _never(_: FrameData) -> bool:
    return False


def _confident(data: FrameData) -> bool:
    return data.confidence > 0.6


class RepStateMachine:
    """Generalized READY -> CONTRACT -> RELAX -> READY rep cycle.

    Transitions (defaults):
        READY -> CONTRACT: contract condition, confidence >= 0.6, 300 ms dwell;
        opens a rep
        CONTRACT -> RELAX: relax condition, confidence >= 0.6, 300 ms dwell;
        closes and scores the rep
        RELAX -> READY: ready condition, confidence >= 0.5, 200 ms dwell
        CONTRACT -> READY: ready condition, confidence >= 0.5, 200 ms dwell;
        abandons the open rep

    Any frame below the error confidence moves the machine to ERROR. The
    first confident frame afterwards resumes the state held before ERROR.
    """

    def __init__(self, settings: StateMachineSettings | None = None) -> None:
        """Initialize machine with settings.

        Args:
            settings: Machine parameters (uses defaults if None)
        """
        self.settings = settings or StateMachineSettings()
        self._is_contract: Condition = _never
        self._is_relax: Condition = _never
        self._is_ready: Condition = _confident
        self._transitions: list[Transition] = self._default_transitions()
        self._state = MachineRunState()
        self._history: deque[HistorySample] = deque(maxlen=self.settings.history_size)

    @classmethod
    def from_thresholds(
        cls,
        metric: str,
        contract_at: float,
        relax_at: float,
        ready_at: float,
        settings: StateMachineSettings | None = None,
    ) -> RepStateMachine:
        """Build a machine driven by one named metric.

        The direction is inferred: if ``contract_at`` is below ``ready_at``
        the metric falls during contraction (e.g. a knee angle), otherwise
        it rises.

        Args:
            metric: Key into ``FrameData.metrics``
            contract_at: Value at which the contraction is reached
            relax_at: Value at which the return phase begins
            ready_at: Value of the fully reset starting position
            settings: Machine parameters

        Returns:
            Configured RepStateMachine
        """
        falling = contract_at < ready_at

        def value(data: FrameData) -> float:
            return data.metrics.get(metric, math.nan)

        if falling:
            conditions = (
                lambda d: value(d) <= contract_at,
                lambda d: value(d) >= relax_at,
                lambda d: value(d) >= ready_at,
            )
        else:
            conditions = (
                lambda d: value(d) >= contract_at,
                lambda d: value(d) <= relax_at,
                lambda d: value(d) <= ready_at,
            )

        machine = cls(settings)
        machine.set_conditions(*conditions)
        return machine

    @property
    def state(self) -> MachineState:
        """Current state."""
        return self._state.state

    @property
    def rep_count(self) -> int:
        """Completed reps."""
        return self._state.rep_count

    @property
    def current_rep(self) -> Rep | None:
        """Rep opened by the last CONTRACT entry, if still open."""
        return self._state.current_rep

    @property
    def completed_reps(self) -> list[Rep]:
        """Copy of all scored reps."""
        return list(self._state.completed_reps)

    @property
    def history(self) -> list[HistorySample]:
        """Copy of the rolling diagnostic history."""
        return list(self._history)

    @property
    def transitions(self) -> list[Transition]:
        """Copy of the transition table."""
        return list(self._transitions)

    def set_conditions(
        self,
        is_contract: Condition,
        is_relax: Condition,
        is_ready: Condition,
    ) -> None:
        """Replace the predicates used by the default transitions."""
        self._is_contract = is_contract
        self._is_relax = is_relax
        self._is_ready = is_ready

    def add_transition(self, transition: Transition) -> None:
        """Append a custom edge. Earlier edges take precedence."""
        self._transitions.append(transition)

    def reset(self) -> None:
        """Clear state, reps and history. Custom transitions are kept."""
        self._state = MachineRunState()
        self._history.clear()

    def update(self, data: FrameData) -> MachineResult:
        """Process one frame.

        Args:
            data: Metrics and confidence for the current frame

        Returns:
            MachineResult describing the state after this frame
        """
        run = self._state
        previous = run.state
        now = data.timestamp_ms
        if run.state_start_ms is None:
            run.state_start_ms = now

        if data.confidence < self.settings.error_confidence:
            if run.state != MachineState.ERROR:
                run.resume_state = run.state
                self._enter(MachineState.ERROR, now)
        else:
            if run.state == MachineState.ERROR:
                self._enter(run.resume_state, now)
            self._apply_transitions(data, now)

        self._record_rep_detail(data)
        self._history.append(HistorySample(run.state, now, data.confidence))

        if run.state != previous:
            logger.debug("State %s -> %s at %.0f ms", previous.value, run.state.value, now)

        return MachineResult(
            state=run.state,
            previous_state=previous,
            rep_count=run.rep_count,
            current_rep=run.current_rep,
            completed_reps=tuple(run.completed_reps),
            state_changed=run.state != previous,
            feedback=self._feedback(data),
            confidence=data.confidence,
            is_valid_transition=self._is_valid_transition(previous, run.state),
        )

    def _default_transitions(self) -> list[Transition]:
        # Conditions are looked up per call so set_conditions() takes effect
        return [
            Transition(
                MachineState.READY,
                MachineState.CONTRACT,
                lambda d: self._is_contract(d),
                min_confidence=0.6,
                min_duration_ms=300,
                on_transition=self._open_rep,
            ),
            Transition(
                MachineState.CONTRACT,
                MachineState.RELAX,
                lambda d: self._is_relax(d),
                min_confidence=0.6,
                min_duration_ms=300,
                on_transition=self._complete_rep,
            ),
            Transition(
                MachineState.RELAX,
                MachineState.READY,
                lambda d: self._is_ready(d),
                min_confidence=0.5,
                min_duration_ms=200,
            ),
            Transition(
                MachineState.CONTRACT,
                MachineState.READY,
                lambda d: self._is_ready(d),
                min_confidence=0.5,
                min_duration_ms=200,
                on_transition=self._abandon_rep,
            ),
        ]

    def _apply_transitions(self, data: FrameData, now: float) -> bool:
        run = self._state
        dwell = now - (run.state_start_ms if run.state_start_ms is not None else now)

        for transition in self._transitions:
            if transition.source != run.state:
                continue
            min_confidence = transition.min_confidence
            if min_confidence is not None and data.confidence < min_confidence:
                continue
            if transition.min_duration_ms is not None and dwell < transition.min_duration_ms:
                continue
            if not transition.condition(data):
                continue

            self._enter(transition.target, now)
            if transition.on_transition is not None:
                transition.on_transition(data)
            return True

        return False

    def _enter(self, target: MachineState, now: float) -> None:
        run = self._state
        run.previous_state = run.state
        run.state = target
        run.state_start_ms = now

    def _open_rep(self, data: FrameData) -> None:
        self._state.current_rep = Rep(
            number=self._state.rep_count + 1,
            start_ms=data.timestamp_ms,
        )

    def _complete_rep(self, data: FrameData) -> None:
        run = self._state
        rep = run.current_rep
        if rep is None:
            return

        rep.end_ms = data.timestamp_ms
        rep.quality = assess_rep_quality(len(rep.form_errors), rep.end_ms - rep.start_ms)
        run.completed_reps.append(rep)
        run.rep_count += 1
        run.current_rep = None
        logger.debug("Rep %d scored %s", rep.number, rep.quality.value)

    def _abandon_rep(self, _: FrameData) -> None:
        self._state.current_rep = None

    def _record_rep_detail(self, data: FrameData) -> None:
        rep = self._state.current_rep
        if rep is None or self._state.state != MachineState.CONTRACT:
            return
        for error in data.form_errors:
            if error not in rep.form_errors:
                rep.form_errors.append(error)
        for text in data.feedback:
            if text not in rep.feedback:
                rep.feedback.append(text)

    def _feedback(self, data: FrameData) -> tuple[str, ...]:
        messages = [STATE_FEEDBACK[self._state.state]]
        if data.confidence < LOW_CONFIDENCE_HINT:
            messages.append(LOW_CONFIDENCE_FEEDBACK)
        messages.extend(text for text in data.feedback if text not in messages)
        return tuple(messages)

    def _is_valid_transition(self, source: MachineState, target: MachineState) -> bool:
        if source == target:
            return True
        if MachineState.ERROR in (source, target):
            return True
        return any(t.source == source and t.target == target for t in self._transitions)
