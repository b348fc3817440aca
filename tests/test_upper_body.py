"""Tests for push-up and pull-up analyzers."""

from __future__ import annotations

from pose_builders import L, arm_positions, build_frame

from form_tracker.exercises.upper_body import PullupAnalyzer, PushupAnalyzer


class TestPushupAnalyzer:
    """Tests for the PushupAnalyzer class."""

    def test_counts_full_rep(self) -> None:
        """Arms straight, bent to 80, then straight again counts once."""
        analyzer = PushupAnalyzer()

        result = analyzer.analyze(build_frame(timestamp=0.0))
        assert result.is_correct_form

        result = analyzer.analyze(build_frame(arm_positions(80), timestamp=0.5))
        assert analyzer.phase == "down"
        assert result.is_correct_form

        result = analyzer.analyze(build_frame(timestamp=1.0))
        assert result.current_count == 1

    def test_sagging_body_line_is_incorrect(self) -> None:
        """A bent shoulder-hip-ankle line fails form even at full depth."""
        analyzer = PushupAnalyzer()
        sagging = {
            **arm_positions(80),
            L.LEFT_HIP: (0.6, 0.5),
            L.RIGHT_HIP: (0.7, 0.5),
        }
        result = analyzer.analyze(build_frame(sagging))

        assert not result.is_correct_form
        assert "straight line" in result.feedback

    def test_hidden_wrist_is_error(self) -> None:
        """All ten tracked landmarks must be visible."""
        analyzer = PushupAnalyzer()
        result = analyzer.analyze(build_frame(visibility={L.LEFT_WRIST: 0.0}))

        assert result.confidence == 0.0
        assert result.current_count == 0


class TestPullupAnalyzer:
    """Tests for the PullupAnalyzer class."""

    def test_initial_hang_is_not_a_rep(self) -> None:
        """Starting in a dead hang does not count."""
        analyzer = PullupAnalyzer()
        assert analyzer.phase == "down"

        for i in range(5):
            result = analyzer.analyze(build_frame(timestamp=i * 0.1, frame_idx=i))

        assert result.current_count == 0
        assert result.is_correct_form

    def test_counts_on_return_to_hang(self) -> None:
        """Pulling up then lowering counts one rep."""
        analyzer = PullupAnalyzer()

        analyzer.analyze(build_frame(timestamp=0.0))
        analyzer.analyze(build_frame(arm_positions(60), timestamp=1.0))
        assert analyzer.phase == "up"

        result = analyzer.analyze(build_frame(timestamp=2.0))
        assert result.current_count == 1
        assert analyzer.phase == "down"

    def test_shoulder_rise_corroborates_pull(self) -> None:
        """A fast shoulder rise enters the up phase before the elbow angle does."""
        analyzer = PullupAnalyzer()
        analyzer.analyze(build_frame(timestamp=0.0))
        raised = {
            L.LEFT_SHOULDER: (0.4, 0.1),
            L.RIGHT_SHOULDER: (0.6, 0.1),
            L.LEFT_ELBOW: (0.3, 0.2),
            L.RIGHT_ELBOW: (0.7, 0.2),
        }
        analyzer.analyze(build_frame(raised, timestamp=0.1))

        assert analyzer.phase == "up"

    def test_hip_must_be_in_frame(self) -> None:
        """At least one hip keeps the body framed."""
        analyzer = PullupAnalyzer()
        hidden = {L.LEFT_HIP: 0.1, L.RIGHT_HIP: 0.1}
        result = analyzer.analyze(build_frame(visibility=hidden))

        assert result.confidence == 0.0
