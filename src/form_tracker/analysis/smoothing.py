"""Signal smoothing for the Y-axis corroborating signals."""

from __future__ import annotations


class ExponentialSmoother:
    """Exponential moving average with frame-to-frame delta.

    ``alpha`` is the weight kept from the previous smoothed value, so larger
    values smooth harder.
    """

    def __init__(self, alpha: float = 0.7) -> None:
        """Initialize smoother.

        Args:
            alpha: Weight of the previous smoothed value, in [0, 1)
        """
        if not 0.0 <= alpha < 1.0:
            raise ValueError(f"alpha must be in [0, 1), got {alpha}")
        self.alpha = alpha
        self._value: float | None = None

    @property
    def value(self) -> float | None:
        """Current smoothed value, None before the first sample."""
        return self._value

    def reset(self) -> None:
        """Forget all samples."""
        self._value = None

    def update(self, sample: float) -> tuple[float, float | None]:
        """Add a sample.

        Args:
            sample: New raw measurement

        Returns:
            Tuple of (smoothed value, change since previous smoothed value).
            The change is None on the first sample.
        """
        previous = self._value
        if previous is None:
            self._value = sample
            return sample, None

        self._value = self.alpha * previous + (1.0 - self.alpha) * sample
        return self._value, self._value - previous
