"""
Render contract: what the drawing layer asks of the core.

The core hands back numeric point sequences in domain units (µs, volts);
turning them into pixels and draw calls is the caller's job.
"""

from dataclasses import dataclass

import numpy as np

from .acquire import SamplingRate
from .scales import Scales
from .waveform import synthesize

# Level marker measured along the x axis; every other marker is a y position.
DELAY_MARKER = "DELAY"
TRIGGER_MARKER = "TRIG"


@dataclass
class Trace:
    """
    One channel ready to draw.

    Attributes:
        name: Channel name ("IN1", "OUT2", ...)
        offset: Vertical position of the channel's zero line, in volts
        time: x coordinates in µs (numpy array)
        voltage: y coordinates in volts (numpy array)
    """

    name: str
    offset: float
    time: np.ndarray
    voltage: np.ndarray

    def __len__(self) -> int:
        return len(self.time)


class Graph:
    """Scales, sampling rate and level markers shared by every panel."""

    def __init__(self, scales=None, rate=SamplingRate.RATE_125MHz):
        self.scales = scales if scales is not None else Scales()
        self.levels = {}
        self.set_rate(rate)

    def set_rate(self, rate):
        self.rate = rate
        self.scales.from_sampling_rate(rate)

    def resize(self, width, height):
        self.scales.resize(width, height)

    def set_level(self, channel, pixel):
        self.levels[str(channel)] = int(pixel)

    def clear_level(self, channel):
        self.levels.pop(str(channel), None)

    def offset(self, channel) -> float:
        """Domain position of a level marker; 0.0 when the channel has none."""
        name = str(channel)
        level = self.levels.get(name)
        if level is None:
            return 0.0
        if name == DELAY_MARKER:
            return self.scales.x_to_offset(level)
        return self.scales.y_to_offset(level)

    def acquisition_trace(self, channel, samples, attenuation=1) -> Trace:
        """
        Place acquired samples on the time axis.

        Samples beyond ``n_samples`` are dropped; a short buffer gives a short
        trace rather than a padded one.
        """
        samples = np.asarray(samples, dtype=float)
        count = min(len(samples), self.scales.n_samples)
        time = self.scales.sample_to_time(np.arange(count))
        voltage = samples[:count] * attenuation
        return Trace(str(channel), self.offset(channel), time, voltage)

    def generator_trace(self, channel, state) -> Trace:
        """
        Preview a generator output, one point per pixel column.

        ``state.frequency`` is in Hz and the time axis in µs.
        """
        columns = self.scales.window.width
        if columns <= 0:
            raise ValueError("Window width is not set.")

        time = self.scales.x_to_offset(np.arange(columns, dtype=float))
        voltage = synthesize(
            state.form,
            time,
            state.amplitude,
            state.frequency / 1_000_000.0,
            offset=state.offset,
            duty_cycle=state.duty_cycle,
        )
        return Trace(str(channel), self.offset(channel), time, voltage)

    def status(self) -> str:
        return (
            f"{self.rate} - {self.scales.v_div()} V/div - "
            f"{self.scales.h_div()} µs/div"
        )
