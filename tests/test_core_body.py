"""Tests for plank, side plank, sit-up and crunch analyzers."""

from __future__ import annotations

from pose_builders import L, build_frame, trunk_positions

from form_tracker.exercises.core_body import (
    CrunchAnalyzer,
    PlankAnalyzer,
    SidePlankAnalyzer,
    SitupAnalyzer,
)


class TestPlankAnalyzer:
    """Tests for the PlankAnalyzer class."""

    FOREARM_PLANK = {
        L.LEFT_SHOULDER: (0.3, 0.4),
        L.RIGHT_SHOULDER: (0.3, 0.4),
        L.LEFT_ELBOW: (0.3, 0.55),
        L.RIGHT_ELBOW: (0.3, 0.55),
        L.LEFT_HIP: (0.7, 0.4),
        L.RIGHT_HIP: (0.7, 0.4),
    }

    def test_good_plank(self) -> None:
        """Elbows under shoulders with a level torso is good form."""
        analyzer = PlankAnalyzer()
        result = analyzer.analyze(build_frame(self.FOREARM_PLANK))

        assert result.is_correct_form
        assert result.confidence > 0

    def test_plank_never_counts(self) -> None:
        """Plank reports form only."""
        analyzer = PlankAnalyzer()
        for i in range(50):
            result = analyzer.analyze(build_frame(self.FOREARM_PLANK, timestamp=float(i)))
        assert result.current_count == 0

    def test_standing_is_not_a_plank(self) -> None:
        """Arms hanging beside the torso fail the shoulder angle."""
        analyzer = PlankAnalyzer()
        result = analyzer.analyze(build_frame())
        assert not result.is_correct_form


class TestSidePlankAnalyzer:
    """Tests for the SidePlankAnalyzer class."""

    # Lying on the left side: the left shoulder is lower in the image
    SIDE_PLANK = {
        L.NOSE: (0.1, 0.45),
        L.LEFT_SHOULDER: (0.2, 0.5),
        L.RIGHT_SHOULDER: (0.2, 0.45),
        L.LEFT_ELBOW: (0.2, 0.6),
        L.RIGHT_ELBOW: (0.25, 0.45),
        L.LEFT_HIP: (0.5, 0.55),
        L.RIGHT_HIP: (0.5, 0.5),
        L.LEFT_KNEE: (0.65, 0.575),
        L.RIGHT_KNEE: (0.65, 0.525),
        L.LEFT_ANKLE: (0.8, 0.6),
        L.RIGHT_ANKLE: (0.8, 0.55),
    }
    SAGGING = {**SIDE_PLANK, L.LEFT_HIP: (0.5, 0.7)}

    def test_95_second_hold(self) -> None:
        """95 s of valid posture reports 95 seconds and 3 buckets."""
        analyzer = SidePlankAnalyzer()
        for t in range(96):
            result = analyzer.analyze(
                build_frame(self.SIDE_PLANK, timestamp=float(t), frame_idx=t)
            )

        assert result.current_count == 95
        assert analyzer.count == 3
        assert result.is_correct_form

    def test_sagging_hips_reset_timer(self) -> None:
        """Dropping the hips breaks the hold without losing buckets."""
        analyzer = SidePlankAnalyzer()
        for t in range(40):
            analyzer.analyze(build_frame(self.SIDE_PLANK, timestamp=float(t)))

        result = analyzer.analyze(build_frame(self.SAGGING, timestamp=40.0))
        assert result.current_count == 0
        assert not result.is_correct_form
        assert analyzer.count == 1

    def test_occluded_frame_keeps_reporting_seconds(self) -> None:
        """A dropped frame mid-hold reports held seconds, not buckets."""
        analyzer = SidePlankAnalyzer()
        for t in range(60):
            valid = analyzer.analyze(build_frame(self.SIDE_PLANK, timestamp=float(t)))
        assert valid.current_count == 59

        occluded = analyzer.analyze(
            build_frame(self.SIDE_PLANK, visibility={L.NOSE: 0.0}, timestamp=60.0)
        )
        assert occluded.confidence == 0.0
        assert occluded.current_count == 59

        result = analyzer.analyze(build_frame(self.SIDE_PLANK, timestamp=61.0))
        assert result.current_count == 61
        assert analyzer.count == 2

    def test_level_shoulders_is_error(self) -> None:
        """Facing the camera square gives no supporting side."""
        analyzer = SidePlankAnalyzer()
        result = analyzer.analyze(build_frame())

        assert result.confidence == 0.0


class TestSitupAnalyzer:
    """Tests for the SitupAnalyzer class."""

    def test_counts_curl_up(self) -> None:
        """Lying flat then curling past 120 degrees counts one rep."""
        analyzer = SitupAnalyzer()

        analyzer.analyze(build_frame(trunk_positions(170), timestamp=0.0))
        assert analyzer.phase == "down"

        result = analyzer.analyze(build_frame(trunk_positions(100), timestamp=1.0))
        assert result.current_count == 1
        assert result.is_correct_form

    def test_shallow_curl_does_not_count(self) -> None:
        """Stopping inside the dead zone does nothing."""
        analyzer = SitupAnalyzer()
        analyzer.analyze(build_frame(trunk_positions(170), timestamp=0.0))
        result = analyzer.analyze(build_frame(trunk_positions(135), timestamp=1.0))

        assert result.current_count == 0
        assert not result.is_correct_form


class TestCrunchAnalyzer:
    """Tests for the CrunchAnalyzer class."""

    def test_shallower_curl_counts(self) -> None:
        """Crunches count at a smaller trunk flexion than sit-ups."""
        analyzer = CrunchAnalyzer()

        analyzer.analyze(build_frame(trunk_positions(170), timestamp=0.0))
        result = analyzer.analyze(build_frame(trunk_positions(130), timestamp=1.0))

        assert result.current_count == 1
        assert result.is_correct_form

    def test_cooldown_between_crunches(self) -> None:
        """A second crunch 300 ms later is held until the cooldown passes."""
        analyzer = CrunchAnalyzer()
        for t, angle in ((0.0, 170), (0.2, 130), (0.3, 170), (0.5, 130)):
            analyzer.analyze(build_frame(trunk_positions(angle), timestamp=t))

        assert analyzer.count == 1
        analyzer.analyze(build_frame(trunk_positions(130), timestamp=0.9))
        assert analyzer.count == 2
