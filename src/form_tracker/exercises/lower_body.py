"""Lower-body analyzers: squat, lunge, calf raise, jump squat, deadlift, wall sit, bridge.

This module is pure logic with NO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from form_tracker.analysis.base import SETUP_GUIDANCE, ExerciseAnalyzer
from form_tracker.analysis.debounce import (
    CycleState,
    HoldState,
    advance_cycle,
    cooldown_elapsed,
    register_count,
)
from form_tracker.analysis.geometry import average, calculate_angle, in_range, midpoint
from form_tracker.analysis.smoothing import ExponentialSmoother
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    Landmark,
    LandmarkFrame,
    LandmarkIndex,
)

L = LandmarkIndex

# Confidence penalty when a knee-angle metric falls back to the hip angle
FALLBACK_CONFIDENCE_PENALTY = 0.15


@dataclass
class SmoothedCycleState(CycleState):
    """Cycle state plus an exponentially smoothed body-height signal."""

    height: ExponentialSmoother = field(default_factory=lambda: ExponentialSmoother(0.7))


def _visible_chain(
    analyzer: ExerciseAnalyzer,
    frame: LandmarkFrame,
) -> tuple[Landmark, Landmark, Landmark] | None:
    """Shoulder-hip-knee of the first side whose three joints are all visible."""
    for shoulder, hip, knee in (
        (L.LEFT_SHOULDER, L.LEFT_HIP, L.LEFT_KNEE),
        (L.RIGHT_SHOULDER, L.RIGHT_HIP, L.RIGHT_KNEE),
    ):
        chain = (frame.get(shoulder), frame.get(hip), frame.get(knee))
        if analyzer.validate_landmarks(chain):
            return chain
    return None


def _knee_angle(frame: LandmarkFrame) -> float:
    """Average hip-knee-ankle angle of both legs."""
    return average(
        calculate_angle(frame.get(L.LEFT_HIP), frame.get(L.LEFT_KNEE), frame.get(L.LEFT_ANKLE)),
        calculate_angle(
            frame.get(L.RIGHT_HIP), frame.get(L.RIGHT_KNEE), frame.get(L.RIGHT_ANKLE)
        ),
    )


LEG_LANDMARKS = (
    L.LEFT_HIP,
    L.RIGHT_HIP,
    L.LEFT_KNEE,
    L.RIGHT_KNEE,
    L.LEFT_ANKLE,
    L.RIGHT_ANKLE,
)


class SquatAnalyzer(ExerciseAnalyzer[SmoothedCycleState]):
    """Bodyweight squat.

    Primary metric is the average knee angle. When the ankles are occluded
    the analyzer falls back to the shoulder-hip-knee angle of one visible
    leg chain, corroborated by hip-height movement, at reduced confidence.

    Transitions:
        up -> down: knee angle <= 120 (fallback: hip angle <= 85 or hip drops)
        down -> up: knee angle >= 160 (fallback: hip angle >= 115 or hip rises),
        counts one rep
    """

    exercise_type = ExerciseType.SQUAT
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.3
    cooldown_ms = 800.0

    DOWN_THRESHOLD = 120.0
    UP_THRESHOLD = 160.0
    DEEP_THRESHOLD = 90.0
    FALLBACK_DOWN_THRESHOLD = 85.0
    FALLBACK_UP_THRESHOLD = 115.0
    HIP_Y_DELTA = 0.03

    def _initial_state(self) -> SmoothedCycleState:
        return SmoothedCycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        legs = [frame.get(idx) for idx in LEG_LANDMARKS]

        if self.validate_landmarks(legs):
            metric = _knee_angle(frame)
            is_down = metric <= self.DOWN_THRESHOLD
            is_up = metric >= self.UP_THRESHOLD
            used = legs
            penalty = 0.0
            state.height.update(midpoint(legs[0], legs[1]).y)
        else:
            chain = _visible_chain(self, frame)
            if chain is None:
                return self.error_analysis(
                    "Step back so your hips, knees and ankles are in view"
                )
            metric = calculate_angle(*chain)
            is_down = metric <= self.FALLBACK_DOWN_THRESHOLD
            is_up = metric >= self.FALLBACK_UP_THRESHOLD
            used = list(chain)
            penalty = FALLBACK_CONFIDENCE_PENALTY

            _, delta = state.height.update(chain[1].y)
            if delta is not None:
                if not is_down and state.phase == "up" and delta > self.HIP_Y_DELTA:
                    is_down = True
                elif not is_up and state.phase == "down" and delta < -self.HIP_Y_DELTA:
                    is_up = True

        advance_cycle(
            state,
            enter=is_down,
            complete=is_up,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        return self.make_result(
            is_correct_form=is_down or is_up,
            feedback=self._feedback(metric, is_down, is_up, fallback=penalty > 0),
            confidence=self.calculate_confidence(used) - penalty,
        )

    def _feedback(self, metric: float, is_down: bool, is_up: bool, fallback: bool) -> str:
        if is_down:
            if not fallback and metric < self.DEEP_THRESHOLD:
                return "Too deep, ease off to protect your knees"
            return "Good depth! Drive up through your heels"
        if is_up:
            return "Stand tall, then sit back down into the squat"
        if self._state.phase == "down":
            return "Keep rising until your legs are straight"
        return "Sit your hips back and bend your knees deeper"


class LungeAnalyzer(ExerciseAnalyzer[CycleState]):
    """Forward lunge tracked on the front (more bent) knee."""

    exercise_type = ExerciseType.LUNGE
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.3
    cooldown_ms = 800.0

    DOWN_THRESHOLD = 105.0
    UP_THRESHOLD = 155.0

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        legs = [frame.get(idx) for idx in LEG_LANDMARKS]
        if not self.validate_landmarks(legs):
            return self.error_analysis("Step back so both legs are fully in view")

        front_knee = min(
            calculate_angle(legs[0], legs[2], legs[4]),
            calculate_angle(legs[1], legs[3], legs[5]),
        )
        is_down = front_knee <= self.DOWN_THRESHOLD
        is_up = front_knee >= self.UP_THRESHOLD

        advance_cycle(
            self._state,
            enter=is_down,
            complete=is_up,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        if is_down:
            feedback = "Good lunge depth, push back up through the front heel"
        elif is_up:
            feedback = "Step forward and lower your back knee toward the floor"
        elif self._state.phase == "down":
            feedback = "Rise slowly to a full stand"
        else:
            feedback = "Bend the front knee further"

        return self.make_result(
            is_correct_form=is_down or is_up,
            feedback=feedback,
            confidence=self.calculate_confidence(legs),
        )


class CalfRaiseAnalyzer(ExerciseAnalyzer[CycleState]):
    """Standing calf raise.

    The lift metric is the ankle height above the toe, averaged over both
    feet (image Y grows downward, so height is ``toe.y - ankle.y``).
    """

    exercise_type = ExerciseType.CALF_RAISE
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.3
    cooldown_ms = 600.0

    UP_LIFT = 0.03
    DOWN_LIFT = 0.01

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        feet = [
            frame.get(L.LEFT_ANKLE),
            frame.get(L.RIGHT_ANKLE),
            frame.get(L.LEFT_FOOT_INDEX),
            frame.get(L.RIGHT_FOOT_INDEX),
        ]
        if not self.validate_landmarks(feet):
            return self.error_analysis("Point the camera at your feet so both are visible")

        ankle_l, ankle_r, toe_l, toe_r = feet
        lift = average(toe_l.y - ankle_l.y, toe_r.y - ankle_r.y)
        is_up = lift > self.UP_LIFT
        is_down = lift < self.DOWN_LIFT

        advance_cycle(
            self._state,
            enter=is_down,
            complete=is_up,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        if is_up:
            feedback = "Rise high onto your toes, then lower slowly"
        elif is_down:
            feedback = "Heels down, now press up onto your toes"
        else:
            feedback = "Lift your heels higher"

        return self.make_result(
            is_correct_form=is_up or is_down,
            feedback=feedback,
            confidence=self.calculate_confidence(feet),
        )


class JumpSquatAnalyzer(ExerciseAnalyzer[SmoothedCycleState]):
    """Jump squat: squat down, explode upward, land tall.

    Transitions:
        up -> down: knee angle <= 120 (fallback hip angle <= 85)
        down -> jump: smoothed hip rises faster than the jump threshold
        jump -> up: knee angle >= 160 (fallback hip angle >= 115), counts one rep
    """

    exercise_type = ExerciseType.JUMP_SQUAT
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.2
    cooldown_ms = 1200.0

    DOWN_THRESHOLD = 120.0
    UP_THRESHOLD = 160.0
    DEEP_THRESHOLD = 90.0
    FALLBACK_DOWN_THRESHOLD = 85.0
    FALLBACK_UP_THRESHOLD = 115.0
    JUMP_THRESHOLD = 0.05
    MIN_BODY_SPAN = 0.5

    def _initial_state(self) -> SmoothedCycleState:
        return SmoothedCycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        framed = (
            self.head_visible(frame)
            and (
                self.is_visible(frame, L.LEFT_SHOULDER, 0.25)
                or self.is_visible(frame, L.RIGHT_SHOULDER, 0.25)
            )
            and self.validate_landmarks(
                [frame.get(i) for i in (L.LEFT_HIP, L.RIGHT_HIP, L.LEFT_KNEE, L.RIGHT_KNEE)],
                0.25,
            )
            and (
                self.is_visible(frame, L.LEFT_ANKLE, 0.2)
                or self.is_visible(frame, L.RIGHT_ANKLE, 0.2)
            )
        )
        if not framed:
            return self.error_analysis("Step back so your whole body is in the frame")

        ankle = frame.get(L.LEFT_ANKLE)
        if not ankle.is_visible(0.2):
            ankle = frame.get(L.RIGHT_ANKLE)
        if abs(ankle.y - frame.get(L.NOSE).y) < self.MIN_BODY_SPAN:
            return self.error_analysis("Too close to the camera, take a step back")

        legs = [frame.get(idx) for idx in LEG_LANDMARKS]
        hips = legs[:2]
        if self.validate_landmarks(legs):
            metric = _knee_angle(frame)
            is_down = metric <= self.DOWN_THRESHOLD
            is_up = metric >= self.UP_THRESHOLD
            used = legs
            penalty = 0.0
        else:
            chain = _visible_chain(self, frame)
            if chain is None:
                return self.error_analysis("Keep your hips and knees in view")
            metric = calculate_angle(*chain)
            is_down = metric <= self.FALLBACK_DOWN_THRESHOLD
            is_up = metric >= self.FALLBACK_UP_THRESHOLD
            used = list(chain) + hips
            penalty = FALLBACK_CONFIDENCE_PENALTY

        _, delta = state.height.update(midpoint(*hips).y)
        # Upward motion is a negative Y change
        is_jumping = delta is not None and -delta > self.JUMP_THRESHOLD

        if state.phase == "up" and is_down:
            state.phase = "down"
        elif state.phase == "down" and is_jumping:
            state.phase = "jump"
        elif state.phase == "jump" and is_up:
            if cooldown_elapsed(state, frame.timestamp_ms, self.cooldown_ms):
                state.phase = "up"
                register_count(state, frame.timestamp_ms)

        return self.make_result(
            is_correct_form=is_down or is_up or is_jumping,
            feedback=self._feedback(metric),
            confidence=self.calculate_confidence(used) - penalty,
        )

    def _feedback(self, metric: float) -> str:
        phase = self._state.phase
        if phase == "down":
            if metric < self.DEEP_THRESHOLD:
                return "Too deep, control the descent to protect your knees"
            return "Good! Sit back, then explode upward"
        if phase == "jump":
            return "Jump hard! Push off through your toes"
        return "Land softly with bent knees, then squat again"


class DeadliftAnalyzer(ExerciseAnalyzer[SmoothedCycleState]):
    """Hip-hinge deadlift.

    Down requires a deep hinge with nearly straight knees so squatting the
    weight up does not count. Hip-height movement corroborates the angle.
    """

    exercise_type = ExerciseType.DEADLIFT
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.25
    cooldown_ms = 1200.0

    HINGE_DOWN_THRESHOLD = 100.0
    HINGE_UP_THRESHOLD = 140.0
    KNEE_BEND_THRESHOLD = 140.0
    TOO_DEEP_THRESHOLD = 80.0
    HIP_Y_DELTA = 0.03

    def _initial_state(self) -> SmoothedCycleState:
        return SmoothedCycleState(phase="up", height=ExponentialSmoother(0.8))

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        torso = [
            frame.get(i)
            for i in (
                L.LEFT_SHOULDER,
                L.RIGHT_SHOULDER,
                L.LEFT_HIP,
                L.RIGHT_HIP,
                L.LEFT_KNEE,
                L.RIGHT_KNEE,
            )
        ]
        ankles = [frame.get(L.LEFT_ANKLE), frame.get(L.RIGHT_ANKLE)]
        framed = (
            self.head_visible(frame)
            and self.validate_landmarks(torso, 0.25)
            and self.validate_landmarks(ankles, 0.2)
        )
        if not framed:
            return self.error_analysis("Step back so your whole body is in the frame")

        sh_l, sh_r, hip_l, hip_r, knee_l, knee_r = torso
        hip_mid = midpoint(hip_l, hip_r)
        hinge = calculate_angle(midpoint(sh_l, sh_r), hip_mid, midpoint(knee_l, knee_r))
        knee = _knee_angle(frame)

        is_down = hinge <= self.HINGE_DOWN_THRESHOLD and knee >= self.KNEE_BEND_THRESHOLD
        is_up = hinge >= self.HINGE_UP_THRESHOLD

        _, delta = state.height.update(hip_mid.y)
        if delta is not None:
            if not is_down and state.phase == "up" and delta > self.HIP_Y_DELTA:
                is_down = True
            elif not is_up and state.phase == "down" and delta < -self.HIP_Y_DELTA:
                is_up = True

        if state.phase == "up" and is_down:
            state.phase = "down"
        elif state.phase == "down" and is_up:
            if cooldown_elapsed(state, frame.timestamp_ms, self.cooldown_ms):
                state.phase = "up"
                register_count(state, frame.timestamp_ms)

        if state.phase == "down":
            if hinge < self.TOO_DEEP_THRESHOLD:
                feedback = "Don't fold too far, keep the hinge controlled"
            else:
                feedback = "Good! Push your hips back as you lower"
        elif is_up:
            feedback = "Drive your hips forward and stand tall"
        else:
            feedback = "Hinge at the hips with soft knees and a flat back"

        return self.make_result(
            is_correct_form=is_down or is_up,
            feedback=feedback,
            confidence=self.calculate_confidence(torso + ankles),
        )


class WallSitAnalyzer(ExerciseAnalyzer[HoldState]):
    """Timed wall sit.

    The posture must hold for a number of consecutive frames before the
    timer starts. ``current_count`` reports held seconds; ``state.count``
    accrues one per completed 10 seconds.
    """

    exercise_type = ExerciseType.WALL_SIT
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.25

    KNEE_ANGLE_MIN = 80.0
    KNEE_ANGLE_MAX = 100.0
    BACK_STRAIGHT_MIN = 160.0
    STABLE_FRAMES_REQUIRED = 10
    BUCKET_SECONDS = 10

    def _initial_state(self) -> HoldState:
        return HoldState()

    def _reported_count(self) -> int:
        return self._state.hold_seconds

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        torso = [
            frame.get(i)
            for i in (
                L.LEFT_SHOULDER,
                L.RIGHT_SHOULDER,
                L.LEFT_HIP,
                L.RIGHT_HIP,
                L.LEFT_KNEE,
                L.RIGHT_KNEE,
            )
        ]
        ankles = [frame.get(L.LEFT_ANKLE), frame.get(L.RIGHT_ANKLE)]
        framed = (
            self.head_visible(frame)
            and self.validate_landmarks(torso, 0.25)
            and self.validate_landmarks(ankles, 0.2)
        )
        if not framed:
            return self.error_analysis("Step back so your whole body is in the frame")

        sh_l, sh_r, hip_l, hip_r, knee_l, knee_r = torso
        knee = _knee_angle(frame)
        back = calculate_angle(
            midpoint(sh_l, sh_r), midpoint(hip_l, hip_r), midpoint(knee_l, knee_r)
        )

        knee_ok = in_range(knee, self.KNEE_ANGLE_MIN, self.KNEE_ANGLE_MAX)
        back_ok = back >= self.BACK_STRAIGHT_MIN
        in_position = knee_ok and back_ok

        if in_position:
            state.stable_frames += 1
        else:
            state.stable_frames = 0

        if state.stable_frames >= self.STABLE_FRAMES_REQUIRED:
            state.hold(frame.timestamp_ms, self.BUCKET_SECONDS)
        elif state.phase == "holding":
            state.release()

        return self.make_result(
            is_correct_form=in_position,
            feedback=self._feedback(knee, back),
            confidence=self.calculate_confidence(torso + ankles),
        )

    def _feedback(self, knee: float, back: float) -> str:
        if self._state.phase == "holding":
            return f"Great! Wall sit held for {self._state.hold_seconds} seconds"
        if knee < self.KNEE_ANGLE_MIN:
            return "Slide up slightly so your knees are at 90 degrees"
        if knee > self.KNEE_ANGLE_MAX:
            return "Slide lower until your knees reach 90 degrees"
        if back < self.BACK_STRAIGHT_MIN:
            return "Press your whole back flat against the wall"
        return "Hold still, the timer starts once you are steady"


class BridgeAnalyzer(ExerciseAnalyzer[CycleState]):
    """Glute bridge.

    Uses the shoulder-hip-knee line and how far the hips sit between the
    shoulder and knee heights (1.0 = level with the knees).
    """

    exercise_type = ExerciseType.BRIDGE
    category = ExerciseCategory.LOWER_BODY
    visibility_floor = 0.3
    cooldown_ms = 1000.0

    UP_LINE = 165.0
    DOWN_LINE = 150.0
    UP_LIFT = 0.6
    DOWN_LIFT = 0.4
    GOOD_LIFT = 0.65

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        points = [
            frame.get(i)
            for i in (
                L.LEFT_SHOULDER,
                L.RIGHT_SHOULDER,
                L.LEFT_HIP,
                L.RIGHT_HIP,
                L.LEFT_KNEE,
                L.RIGHT_KNEE,
            )
        ]
        if not self.validate_landmarks(points):
            return self.error_analysis("Turn sideways so shoulders, hips and knees are visible")

        sh_l, sh_r, hip_l, hip_r, knee_l, knee_r = points
        line = average(
            calculate_angle(sh_l, hip_l, knee_l),
            calculate_angle(sh_r, hip_r, knee_r),
        )
        shoulder_y = (sh_l.y + sh_r.y) / 2
        hip_y = (hip_l.y + hip_r.y) / 2
        knee_y = (knee_l.y + knee_r.y) / 2
        lift = 1 - (hip_y - shoulder_y) / (knee_y - shoulder_y + 1e-6)

        is_up = line > self.UP_LINE and lift > self.UP_LIFT
        is_down = line < self.DOWN_LINE or lift < self.DOWN_LIFT

        advance_cycle(
            self._state,
            enter=is_down,
            complete=is_up,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        good = line > self.UP_LINE and lift > self.GOOD_LIFT
        if good:
            feedback = "Nice! Hips fully raised, squeeze your glutes"
        elif is_down:
            feedback = "Drive through your heels and lift your hips"
        else:
            feedback = SETUP_GUIDANCE if not is_up else "Raise your hips a little higher"

        return self.make_result(
            is_correct_form=good,
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )
