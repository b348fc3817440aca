"""Pytest fixtures for Form Tracker tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from pose_builders import build_frame, squat_frame

from form_tracker.core.config import SessionSettings, Settings, StateMachineSettings
from form_tracker.core.types import Landmark, LandmarkFrame


@pytest.fixture
def sample_landmark() -> Landmark:
    """Create a sample landmark."""
    return Landmark(x=0.5, y=0.5, z=0.0, visibility=0.95)


@pytest.fixture
def standing_frame() -> LandmarkFrame:
    """Create a neutral standing frame with every landmark visible."""
    return build_frame()


@pytest.fixture
def squat_rep_frames() -> list[LandmarkFrame]:
    """Create one full squat rep: 170 -> 115 -> 165 degrees over 10 frames."""
    angles = [170, 155, 140, 125, 115, 115, 130, 145, 160, 165]
    return [
        squat_frame(angle, timestamp=i * 0.1, frame_idx=i) for i, angle in enumerate(angles)
    ]


@pytest.fixture
def session_start() -> datetime:
    """Fixed wall-clock time for session tests."""
    return datetime(2024, 5, 1, 9, 0, 0)


@pytest.fixture
def session_settings() -> SessionSettings:
    """Create session settings for testing."""
    return SessionSettings(body_weight_kg=70.0, history_size=100)


@pytest.fixture
def machine_settings() -> StateMachineSettings:
    """Create state machine settings for testing."""
    return StateMachineSettings()


@pytest.fixture
def settings(session_settings: SessionSettings) -> Settings:
    """Create application settings for testing."""
    return Settings(session=session_settings)
