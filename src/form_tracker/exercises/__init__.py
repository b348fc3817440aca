"""Per-exercise analyzers grouped by body region."""

from form_tracker.exercises.registry import (
    ANALYZERS,
    analyze_sequence,
    analyzers_by_category,
    create_analyzer,
)

__all__ = ["ANALYZERS", "create_analyzer", "analyzers_by_category", "analyze_sequence"]
