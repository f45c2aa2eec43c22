"""
Coordinate engine: maps sample indices, time (µs), volts and pixels.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .defaults import BUFFER_SIZE, GRATICULE_DIVISIONS, VERTICAL_RANGE


@dataclass
class Rect:
    """Size of the drawing surface in pixels."""

    width: int = 0
    height: int = 0


@dataclass
class Scales:
    """
    Visible domain of the graph.

    Attributes:
        h: Horizontal range in µs, symmetric around the trigger point.
        v: Vertical range in volts.
        n_samples: Number of samples in one acquisition buffer.
        window: Current drawing surface size. Callers must keep it up to date
            before using ``x_to_offset`` / ``y_to_offset``.
    """

    h: Tuple[float, float] = (0.0, 0.0)
    v: Tuple[float, float] = VERTICAL_RANGE
    n_samples: int = BUFFER_SIZE
    window: Rect = field(default_factory=Rect)

    def width(self) -> float:
        return self.h[1] - self.h[0]

    def height(self) -> float:
        return self.v[1] - self.v[0]

    def from_sampling_rate(self, rate):
        """Centre the horizontal range on 0, spanning one buffer of ``rate``."""
        half = rate.buffer_duration / 2.0
        self.h = (-half, half)

    def h_div(self) -> float:
        """Width of one graticule division, in µs."""
        return self.width() / GRATICULE_DIVISIONS

    def v_div(self) -> float:
        """Height of one graticule division, in volts."""
        return self.height() / GRATICULE_DIVISIONS

    def sample_to_time(self, sample):
        """
        Time of a 0-based sample index: ``h[0]`` at 0, ``h[1]`` at ``n_samples``.

        Accepts a scalar or a numpy array of indices.
        """
        if self.n_samples <= 0:
            raise ValueError(f"n_samples must be positive, got {self.n_samples}")
        return sample / self.n_samples * self.width() + self.h[0]

    def resize(self, width, height):
        self.window = Rect(int(width), int(height))

    def x_to_offset(self, x):
        """Pixel column to time; column 0 is the left edge."""
        if self.window.width <= 0:
            raise ValueError("Window width is not set.")
        return x / self.window.width * self.width() + self.h[0]

    def y_to_offset(self, y):
        """Pixel row to volts; row 0 is the top edge, so the axis is inverted."""
        if self.window.height <= 0:
            raise ValueError("Window height is not set.")
        return y / -self.window.height * self.height() + self.v[1]
