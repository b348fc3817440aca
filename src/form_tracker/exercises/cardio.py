"""Cardio analyzers: burpee, mountain climber, jumping jack, high knees."""

from __future__ import annotations

from dataclasses import dataclass

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.analysis.debounce import (
    CycleState,
    advance_cycle,
    cooldown_elapsed,
    register_count,
)
from form_tracker.analysis.geometry import (
    average,
    calculate_angle,
    calculate_distance,
    vertical_distance,
)
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    LandmarkFrame,
    LandmarkIndex,
)

L = LandmarkIndex


class BurpeeAnalyzer(ExerciseAnalyzer[CycleState]):
    """Burpee: squat, push-up, then jump back to standing.

    Transitions:
        up -> squat: knee angle <= 110
        squat -> pushup: elbow angle <= 90
        pushup -> up: ankles lift off the floor, counts one rep
    """

    exercise_type = ExerciseType.BURPEE
    category = ExerciseCategory.CARDIO
    visibility_floor = 0.3
    cooldown_ms = 1500.0

    SQUAT_THRESHOLD = 110.0
    PUSHUP_THRESHOLD = 90.0
    JUMP_LIFT = 0.05

    LANDMARKS = (
        L.LEFT_SHOULDER,
        L.RIGHT_SHOULDER,
        L.LEFT_ELBOW,
        L.RIGHT_ELBOW,
        L.LEFT_WRIST,
        L.RIGHT_WRIST,
        L.LEFT_HIP,
        L.RIGHT_HIP,
        L.LEFT_KNEE,
        L.RIGHT_KNEE,
        L.LEFT_ANKLE,
        L.RIGHT_ANKLE,
        L.LEFT_FOOT_INDEX,
        L.RIGHT_FOOT_INDEX,
    )

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        points = [frame.get(i) for i in self.LANDMARKS]
        if not self.validate_landmarks(points):
            return self.error_analysis("Step back so your whole body is in the frame")

        (sh_l, sh_r, el_l, el_r, wr_l, wr_r, hip_l, hip_r,
         knee_l, knee_r, an_l, an_r, toe_l, toe_r) = points

        knee = average(calculate_angle(hip_l, knee_l, an_l), calculate_angle(hip_r, knee_r, an_r))
        elbow = average(calculate_angle(sh_l, el_l, wr_l), calculate_angle(sh_r, el_r, wr_r))
        # Ankle height above the toes (image Y grows downward)
        lift = average(toe_l.y - an_l.y, toe_r.y - an_r.y)

        in_squat = knee <= self.SQUAT_THRESHOLD
        in_pushup = elbow <= self.PUSHUP_THRESHOLD
        jumping = lift > self.JUMP_LIFT

        if state.phase == "up" and in_squat:
            state.phase = "squat"
        elif state.phase == "squat" and in_pushup:
            state.phase = "pushup"
        elif state.phase == "pushup" and jumping:
            if cooldown_elapsed(state, frame.timestamp_ms, self.cooldown_ms):
                state.phase = "up"
                register_count(state, frame.timestamp_ms)

        feedback = {
            "squat": "Hands down and kick back into a push-up",
            "pushup": "Jump your feet in and explode up",
        }.get(state.phase, "Drop into a squat to start the burpee")

        return self.make_result(
            is_correct_form=in_squat or in_pushup or jumping,
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )


class MountainClimberAnalyzer(ExerciseAnalyzer[CycleState]):
    """Mountain climbers, counted per alternating knee drive.

    A knee is driven when it sits within 0.1 of its hip height. The first
    drive only picks the starting side; every switch to the other side
    counts one rep.
    """

    exercise_type = ExerciseType.MOUNTAIN_CLIMBER
    category = ExerciseCategory.CARDIO
    visibility_floor = 0.3
    cooldown_ms = 600.0

    KNEE_DRIVE_DISTANCE = 0.1

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        points = [
            frame.get(i)
            for i in (
                L.LEFT_HIP,
                L.RIGHT_HIP,
                L.LEFT_KNEE,
                L.RIGHT_KNEE,
                L.LEFT_ANKLE,
                L.RIGHT_ANKLE,
            )
        ]
        if not self.validate_landmarks(points):
            return self.error_analysis("Turn sideways so your hips, knees and feet are visible")

        hip_l, hip_r, knee_l, knee_r = points[:4]
        left_drive = vertical_distance(hip_l, knee_l) < self.KNEE_DRIVE_DISTANCE
        right_drive = vertical_distance(hip_r, knee_r) < self.KNEE_DRIVE_DISTANCE

        driven: str | None = None
        if left_drive and not right_drive:
            driven = "left"
        elif right_drive and not left_drive:
            driven = "right"

        if driven is not None and driven != state.phase:
            if state.phase == "up":
                state.phase = driven
            elif cooldown_elapsed(state, frame.timestamp_ms, self.cooldown_ms):
                state.phase = driven
                register_count(state, frame.timestamp_ms)

        if driven is None:
            feedback = "Drive one knee toward your chest"
        else:
            feedback = "Good pace! Switch legs quickly"

        return self.make_result(
            is_correct_form=left_drive or right_drive,
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )


class JumpingJackAnalyzer(ExerciseAnalyzer[CycleState]):
    """Jumping jacks.

    Open means arms raised and feet apart; a rep counts on the return to
    closed. Leg spread is the hip width normalized by shoulder width.
    """

    exercise_type = ExerciseType.JUMPING_JACK
    category = ExerciseCategory.CARDIO
    visibility_floor = 0.2
    cooldown_ms = 800.0

    ARMS_OPEN = 120.0
    ARMS_CLOSED = 60.0
    SPREAD_OPEN = 0.3
    SPREAD_CLOSED = 0.15
    MIN_BODY_SPAN = 0.5

    def _initial_state(self) -> CycleState:
        return CycleState(phase="close")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        shoulders = [frame.get(L.LEFT_SHOULDER), frame.get(L.RIGHT_SHOULDER)]
        hips = [frame.get(L.LEFT_HIP), frame.get(L.RIGHT_HIP)]
        arms = [
            frame.get(L.LEFT_ELBOW),
            frame.get(L.RIGHT_ELBOW),
            frame.get(L.LEFT_WRIST),
            frame.get(L.RIGHT_WRIST),
        ]
        ankles = [
            lm for lm in (frame.get(L.LEFT_ANKLE), frame.get(L.RIGHT_ANKLE)) if lm.is_visible(0.2)
        ]

        framed = (
            self.head_visible(frame)
            and self.validate_landmarks(shoulders + hips, 0.25)
            and self.validate_landmarks(arms, 0.2)
            and bool(ankles)
        )
        if not framed:
            return self.error_analysis("Step back so your whole body is in the frame")

        if abs(ankles[0].y - frame.get(L.NOSE).y) < self.MIN_BODY_SPAN:
            return self.error_analysis("Too close to the camera, take a step back")

        sh_l, sh_r = shoulders
        el_l, el_r, wr_l, wr_r = arms
        arm_angle = average(calculate_angle(sh_l, el_l, wr_l), calculate_angle(sh_r, el_r, wr_r))
        shoulder_width = calculate_distance(sh_l, sh_r)
        if shoulder_width == 0:
            return self.error_analysis("Face the camera squarely")
        spread = calculate_distance(*hips) / shoulder_width

        is_open = arm_angle >= self.ARMS_OPEN and spread >= self.SPREAD_OPEN
        is_closed = arm_angle <= self.ARMS_CLOSED and spread <= self.SPREAD_CLOSED

        advance_cycle(
            self._state,
            enter=is_open,
            complete=is_closed,
            rest_phase="close",
            active_phase="open",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        if is_open:
            feedback = "Arms up, feet wide! Now jump back in"
        elif is_closed:
            feedback = "Jump out and raise your arms overhead"
        else:
            feedback = "Use the full range, arms all the way up and down"

        return self.make_result(
            is_correct_form=is_open or is_closed,
            feedback=feedback,
            confidence=self.calculate_confidence(shoulders + hips + arms + ankles),
        )


@dataclass
class HighKneesState(CycleState):
    """High knees state; ``last_side`` is the knee that last counted."""

    phase: str = "both_low"
    last_side: str | None = None


class HighKneesAnalyzer(ExerciseAnalyzer[HighKneesState]):
    """High knees, one rep per knee raise on alternating sides.

    Knee height is measured relative to the average hip height: at least
    0.1 above is high, at least 0.1 below is low. Dropping both knees
    clears the last side so the next raise of either knee counts.
    """

    exercise_type = ExerciseType.HIGH_KNEES
    category = ExerciseCategory.CARDIO
    visibility_floor = 0.3
    cooldown_ms = 600.0

    HIGH_OFFSET = -0.1
    LOW_OFFSET = 0.1

    def _initial_state(self) -> HighKneesState:
        return HighKneesState()

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        points = [frame.get(i) for i in (L.LEFT_HIP, L.RIGHT_HIP, L.LEFT_KNEE, L.RIGHT_KNEE)]
        framed = self.head_visible(frame, nose=0.4, eyes=0.3) and self.validate_landmarks(points)
        if not framed:
            return self.error_analysis("Step back so your head, hips and knees are in view")

        hip_l, hip_r, knee_l, knee_r = points
        hip_y = (hip_l.y + hip_r.y) / 2
        left_rel = knee_l.y - hip_y
        right_rel = knee_r.y - hip_y

        left_high = left_rel <= self.HIGH_OFFSET
        right_high = right_rel <= self.HIGH_OFFSET
        both_low = left_rel >= self.LOW_OFFSET and right_rel >= self.LOW_OFFSET

        side: str | None = None
        if left_high and not right_high:
            side = "left"
        elif right_high and not left_high:
            side = "right"

        if side is not None and side != state.last_side:
            if cooldown_elapsed(state, frame.timestamp_ms, self.cooldown_ms):
                register_count(state, frame.timestamp_ms)
                state.last_side = side
                state.phase = f"{side}_high"
        elif both_low:
            state.phase = "both_low"
            state.last_side = None

        if side is not None:
            feedback = "Great height! Keep alternating"
        elif both_low:
            feedback = "Drive your knees up to hip height"
        else:
            feedback = "Lift your knees higher"

        return self.make_result(
            is_correct_form=side is not None,
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )
