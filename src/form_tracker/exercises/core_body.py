"""Core analyzers: plank, side plank, sit-up, crunch."""

from __future__ import annotations

from form_tracker.analysis.base import ExerciseAnalyzer
from form_tracker.analysis.debounce import CycleState, HoldState, advance_cycle
from form_tracker.analysis.geometry import average, calculate_angle, in_range
from form_tracker.core.types import (
    AnalysisResult,
    ExerciseCategory,
    ExerciseType,
    LandmarkFrame,
    LandmarkIndex,
)

L = LandmarkIndex

TRUNK_LANDMARKS = (
    L.LEFT_SHOULDER,
    L.RIGHT_SHOULDER,
    L.LEFT_HIP,
    L.RIGHT_HIP,
    L.LEFT_KNEE,
    L.RIGHT_KNEE,
)


class PlankAnalyzer(ExerciseAnalyzer[CycleState]):
    """Forearm plank. Reports form only and never counts."""

    exercise_type = ExerciseType.PLANK
    category = ExerciseCategory.CORE
    visibility_floor = 0.3

    SHOULDER_ANGLE_MIN = 80.0
    SHOULDER_ANGLE_MAX = 100.0

    def _initial_state(self) -> CycleState:
        return CycleState(phase="setup")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        points = [
            frame.get(i)
            for i in (
                L.LEFT_SHOULDER,
                L.RIGHT_SHOULDER,
                L.LEFT_ELBOW,
                L.RIGHT_ELBOW,
                L.LEFT_HIP,
                L.RIGHT_HIP,
            )
        ]
        if not self.validate_landmarks(points):
            return self.error_analysis("Turn sideways so your shoulders, elbows and hips show")

        sh_l, sh_r, el_l, el_r, hip_l, hip_r = points
        # Angle at the shoulder between upper arm and torso
        shoulder_angle = average(
            calculate_angle(el_l, sh_l, hip_l),
            calculate_angle(el_r, sh_r, hip_r),
        )
        good = in_range(shoulder_angle, self.SHOULDER_ANGLE_MIN, self.SHOULDER_ANGLE_MAX)
        self._state.phase = "holding" if good else "setup"

        if good:
            feedback = "Great plank! Keep your core tight"
        elif shoulder_angle < self.SHOULDER_ANGLE_MIN:
            feedback = "Bring your elbows under your shoulders"
        else:
            feedback = "Lower your hips to line up with your shoulders"

        return self.make_result(
            is_correct_form=good,
            feedback=feedback,
            confidence=self.calculate_confidence(points),
        )


class SidePlankAnalyzer(ExerciseAnalyzer[HoldState]):
    """Side plank hold on whichever side is closer to the floor.

    ``current_count`` reports held seconds of the running hold;
    ``state.count`` accrues one per completed 30 seconds.
    """

    exercise_type = ExerciseType.SIDE_PLANK
    category = ExerciseCategory.CORE
    visibility_floor = 0.3

    LINE_MIN = 160.0
    LINE_MAX = 180.0
    BUCKET_SECONDS = 30

    def _initial_state(self) -> HoldState:
        return HoldState()

    def _reported_count(self) -> int:
        return self._state.hold_seconds

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        state = self._state
        hips_knees = [
            frame.get(i) for i in (L.LEFT_HIP, L.RIGHT_HIP, L.LEFT_KNEE, L.RIGHT_KNEE)
        ]
        framed = (
            self.is_visible(frame, L.NOSE, 0.3)
            and (
                self.is_visible(frame, L.LEFT_SHOULDER, 0.3)
                or self.is_visible(frame, L.RIGHT_SHOULDER, 0.3)
            )
            and (
                self.is_visible(frame, L.LEFT_ELBOW, 0.2)
                or self.is_visible(frame, L.RIGHT_ELBOW, 0.2)
            )
            and self.validate_landmarks(hips_knees)
        )
        if not framed:
            return self.error_analysis("Turn sideways so your full body is in view")

        sh_l = frame.get(L.LEFT_SHOULDER)
        sh_r = frame.get(L.RIGHT_SHOULDER)
        # The supporting side is the lower shoulder (larger image Y)
        if sh_l.y > sh_r.y:
            shoulder, hip, ankle = sh_l, frame.get(L.LEFT_HIP), frame.get(L.LEFT_ANKLE)
        elif sh_r.y > sh_l.y:
            shoulder, hip, ankle = sh_r, frame.get(L.RIGHT_HIP), frame.get(L.RIGHT_ANKLE)
        else:
            return self.error_analysis("Roll onto your side and stack your shoulders")

        if not (shoulder.is_visible(self.visibility_floor) and ankle.is_visible(0.2)):
            return self.error_analysis("Keep your supporting shoulder and ankle in view")

        line = calculate_angle(shoulder, hip, ankle)
        good = in_range(line, self.LINE_MIN, self.LINE_MAX)

        if good:
            state.hold(frame.timestamp_ms, self.BUCKET_SECONDS)
            feedback = f"Great! Side plank held for {state.hold_seconds} seconds"
        else:
            if state.phase == "holding":
                state.release()
            feedback = "Lift your hips to form a straight line"

        return self.make_result(
            is_correct_form=good,
            feedback=feedback,
            confidence=self.calculate_confidence([shoulder, hip, ankle, *hips_knees]),
        )


class _TrunkFlexionAnalyzer(ExerciseAnalyzer[CycleState]):
    """Shared trunk-flexion cycle for sit-ups and crunches.

    The metric is the average shoulder-hip-knee angle: large when lying
    flat, small when curled up.
    """

    visibility_floor = 0.3

    FLAT_THRESHOLD: float
    CURLED_THRESHOLD: float
    GOOD_THRESHOLD: float
    GOOD_FEEDBACK: str
    CURL_FEEDBACK: str

    def _initial_state(self) -> CycleState:
        return CycleState(phase="up")

    def analyze(self, frame: LandmarkFrame) -> AnalysisResult:
        points = [frame.get(i) for i in TRUNK_LANDMARKS]
        if not self.validate_landmarks(points):
            return self.error_analysis("Turn sideways so shoulders, hips and knees are visible")

        sh_l, sh_r, hip_l, hip_r, knee_l, knee_r = points
        flexion = average(
            calculate_angle(sh_l, hip_l, knee_l),
            calculate_angle(sh_r, hip_r, knee_r),
        )
        is_flat = flexion > self.FLAT_THRESHOLD
        is_curled = flexion < self.CURLED_THRESHOLD

        advance_cycle(
            self._state,
            enter=is_flat,
            complete=is_curled,
            rest_phase="up",
            active_phase="down",
            now_ms=frame.timestamp_ms,
            cooldown_ms=self.cooldown_ms,
        )

        good = flexion < self.GOOD_THRESHOLD
        return self.make_result(
            is_correct_form=good,
            feedback=self.GOOD_FEEDBACK if good else self.CURL_FEEDBACK,
            confidence=self.calculate_confidence(points),
        )


class SitupAnalyzer(_TrunkFlexionAnalyzer):
    exercise_type = ExerciseType.SITUP
    category = ExerciseCategory.CORE
    cooldown_ms = 800.0

    FLAT_THRESHOLD = 150.0
    CURLED_THRESHOLD = 120.0
    GOOD_THRESHOLD = 110.0
    GOOD_FEEDBACK = "Good sit-up! Lower back down slowly"
    CURL_FEEDBACK = "Curl up further, bring your chest toward your knees"


class CrunchAnalyzer(_TrunkFlexionAnalyzer):
    exercise_type = ExerciseType.CRUNCH
    category = ExerciseCategory.CORE
    cooldown_ms = 600.0

    FLAT_THRESHOLD = 160.0
    CURLED_THRESHOLD = 140.0
    GOOD_THRESHOLD = 135.0
    GOOD_FEEDBACK = "Nice crunch! Squeeze your abs at the top"
    CURL_FEEDBACK = "Lift your shoulder blades off the floor"
