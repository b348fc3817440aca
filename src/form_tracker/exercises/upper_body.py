"""Upper-body analyzers: push-up and pull-up."""

from __future__ import annotations

from dataclasses import dataclass, field

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.analysis.debounce import CycleState, advance_cycle
from form_tracker.analysis.geometry import average, calculate_angle, midpoint
from form_tracker.analysis.smoothing import ExponentialSmoother
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    LandmarkFrame,
    LandmarkIndex,
)

L = LandmarkIndex


class PushupAnalyzer(ExerciseAnalyzer[CycleState]):
    """Standard push-up.

    Elbow angle drives the cycle; the shoulder-hip-ankle line must stay
    straight for a frame to count as good form.
    """

    exercise_type = ExerciseType.PUSHUP
    category = ExerciseCategory.UPPER_BODY
    visibility_floor = 0.3
    cooldown_ms = 800.0

    DOWN_THRESHOLD = 90.0
    UP_THRESHOLD = 160.0
    BODY_LINE_MIN = 160.0

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        points = [
            frame.get(i)
            for i in (
                L.LEFT_SHOULDER,
                L.RIGHT_SHOULDER,
                L.LEFT_ELBOW,
                L.RIGHT_ELBOW,
                L.LEFT_WRIST,
                L.RIGHT_WRIST,
                L.LEFT_HIP,
                L.RIGHT_HIP,
                L.LEFT_ANKLE,
                L.RIGHT_ANKLE,
            )
        ]
        if not self.validate_landmarks(points):
            return self.error_analysis("Turn sideways so your arms, hips and feet are visible")

        sh_l, sh_r, el_l, el_r, wr_l, wr_r, hip_l, hip_r, an_l, an_r = points
        elbow = average(calculate_angle(sh_l, el_l, wr_l), calculate_angle(sh_r, el_r, wr_r))
        body_line = calculate_angle(
            midpoint(sh_l, sh_r), midpoint(hip_l, hip_r), midpoint(an_l, an_r)
        )

        is_down = elbow <= self.DOWN_THRESHOLD
        is_up = elbow >= self.UP_THRESHOLD
        straight = body_line >= self.BODY_LINE_MIN

        advance_cycle(
            self._state,
            enter=is_down,
            complete=is_up,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        if not straight:
            feedback = "Keep your body in a straight line from shoulders to heels"
        elif is_down:
            feedback = "Good depth! Press back up"
        elif is_up:
            feedback = "Lower your chest toward the floor"
        elif self._state.phase == "down":
            feedback = "Push all the way up until your arms are straight"
        else:
            feedback = "Bend your elbows to 90 degrees"

        return self.make_result(
            is_correct_form=straight and (is_down or is_up),
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )


@dataclass
class PullupState(CycleState):
    """Pull-up state with smoothed shoulder height."""

    phase: str = "down"
    shoulder_height: ExponentialSmoother = field(
        default_factory=lambda: ExponentialSmoother(0.7)
    )


class PullupAnalyzer(ExerciseAnalyzer[PullupState]):
    """Pull-up from a dead hang.

    Starts in ``down`` so the initial hang is never a rep. A rep counts on
    the return to the hang after the chin has come up.

    Transitions:
        down -> up: elbow angle <= 70 or shoulders rise by more than 0.03
        up -> down: elbow angle >= 150 or shoulders drop by more than 0.03,
        counts one rep
    """

    exercise_type = ExerciseType.PULLUP
    category = ExerciseCategory.UPPER_BODY
    visibility_floor = 0.3
    cooldown_ms = 1500.0

    UP_THRESHOLD = 70.0
    DOWN_THRESHOLD = 150.0
    SHOULDER_Y_DELTA = 0.03

    def _initial_state(self) -> PullupState:
        return PullupState()

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        shoulders = [frame.get(L.LEFT_SHOULDER), frame.get(L.RIGHT_SHOULDER)]
        arms = [
            frame.get(L.LEFT_ELBOW),
            frame.get(L.RIGHT_ELBOW),
            frame.get(L.LEFT_WRIST),
            frame.get(L.RIGHT_WRIST),
        ]
        hips = [
            lm for lm in (frame.get(L.LEFT_HIP), frame.get(L.RIGHT_HIP)) if lm.is_visible(0.2)
        ]

        framed = (
            self.head_visible(frame, nose=0.4, eyes=0.3)
            and self.validate_landmarks(shoulders, 0.4)
            and self.validate_landmarks(arms)
            and bool(hips)
        )
        if not framed:
            return self.error_analysis("Step back so your head, arms and hips are in view")

        sh_l, sh_r = shoulders
        el_l, el_r, wr_l, wr_r = arms
        elbow = average(calculate_angle(sh_l, el_l, wr_l), calculate_angle(sh_r, el_r, wr_r))

        _, delta = state.shoulder_height.update((sh_l.y + sh_r.y) / 2)
        rising = delta is not None and -delta > self.SHOULDER_Y_DELTA
        falling = delta is not None and delta > self.SHOULDER_Y_DELTA

        is_up = elbow <= self.UP_THRESHOLD or rising
        is_down = elbow >= self.DOWN_THRESHOLD or falling

        advance_cycle(
            state,
            enter=is_up,
            complete=is_down,
            rest_phase="down",
            active_phase="up",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        if is_up:
            feedback = "Chin over the bar! Lower with control"
        elif is_down:
            feedback = "Full hang, now pull your chest to the bar"
        elif state.phase == "up":
            feedback = "Lower all the way to straight arms"
        else:
            feedback = "Pull higher, drive your elbows down"

        return self.make_result(
            is_correct_form=is_up or is_down,
            feedback=feedback,
            confidence=self.calculate_confidence(shoulders + arms + hips),
        )
