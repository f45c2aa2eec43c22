"""
Acquisition subsystem: analog inputs, sampling rate and buffer readout.
"""

from enum import Enum

from .defaults import BUFFER_SIZE
from .subsystem import Subsystem


class Source(Enum):
    IN1 = 1
    IN2 = 2

    def __str__(self):
        return self.name

    @property
    def scpi(self):
        return f"SOUR{self.value}"

    @classmethod
    def parse(cls, value):
        """Accepts a Source, its name ("IN1", "in2") or its number."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(
                f"Invalid source '{value}'. Must be one of: {[s.name for s in cls]}"
            ) from None


class Gain(Enum):
    LV = "LV"
    HV = "HV"

    def __str__(self):
        return self.value


class Units(Enum):
    VOLTS = "VOLTS"
    RAW = "RAW"

    def __str__(self):
        return self.value


# Buffer durations in microseconds: BUFFER_SIZE samples at 125 MS/s / decimation.
_BUFFER_DURATION_US = {
    1: 131.072,
    8: 1_048.576,
    64: 8_388.608,
    1024: 134_217.728,
    8192: 1_073_741.824,
    65536: 8_589_934.592,
}

_RATE_LABELS = {
    1: "125 MHz",
    8: "15.6 MHz",
    64: "1.9 MHz",
    1024: "103.8 kHz",
    8192: "15.2 kHz",
    65536: "1.9 kHz",
}


class SamplingRate(Enum):
    """Supported sampling rates, valued by their decimation factor."""

    RATE_125MHz = 1
    RATE_15_6MHz = 8
    RATE_1_9MHz = 64
    RATE_103_8kHz = 1024
    RATE_15_2kHz = 8192
    RATE_1_9kHz = 65536

    def __str__(self):
        return _RATE_LABELS[self.value]

    @property
    def decimation(self):
        return self.value

    @property
    def buffer_duration(self):
        """Wall-clock span of one full buffer, in microseconds."""
        return _BUFFER_DURATION_US[self.value]

    @classmethod
    def from_decimation(cls, decimation):
        try:
            return cls(int(decimation))
        except ValueError:
            raise ValueError(
                f"Invalid decimation {decimation}. "
                f"Must be one of: {[r.value for r in cls]}"
            ) from None


ATTENUATIONS = (1, 10, 100)


class Acquire(Subsystem):
    """
    Acquisition commands (``ACQ:*``).

    Probe attenuation is a client-side setting only; it is applied to the
    samples when they are drawn and never sent to the device.
    """

    def __init__(self, transport):
        super().__init__(transport)
        self.started = False
        self.attenuation = {source: 1 for source in Source}

    def start(self):
        self.send_command("ACQ:START")
        self.started = True

    def stop(self):
        self.send_command("ACQ:STOP")
        self.started = False

    def is_started(self):
        return self.started

    def reset(self):
        self.send_command("ACQ:RST")

    def set_units(self, unit):
        """Select the unit of the data buffer (VOLTS or RAW)."""
        if not isinstance(unit, Units):
            try:
                unit = Units(str(unit).upper())
            except ValueError:
                raise ValueError(
                    f"Invalid unit '{unit}'. Must be one of: {[u.value for u in Units]}"
                ) from None
        self.send_command(f"ACQ:DATA:UNITS {unit}")

    def set_decimation(self, value):
        """
        Set the decimation factor.

        Args:
            value (SamplingRate|int): A sampling rate or its decimation (1, 8, 64, ...).
        """
        if not isinstance(value, SamplingRate):
            value = SamplingRate.from_decimation(value)
        self.send_command(f"ACQ:DEC {value.decimation}")

    def get_decimation(self):
        """
        Returns:
            SamplingRate: Current rate, or None if the reply is not a known decimation.
        """
        return self.query("ACQ:DEC?", lambda reply: SamplingRate(int(reply)))

    def enable_average(self):
        self.send_command("ACQ:AVG ON")

    def disable_average(self):
        self.send_command("ACQ:AVG OFF")

    def is_average_enabled(self):
        return self.query("ACQ:AVG?", lambda reply: {"ON": True, "OFF": False}[reply.upper()])

    def get_gain(self, source):
        source = Source.parse(source)
        return self.query(f"ACQ:{source.scpi}:GAIN?", lambda reply: Gain(reply.upper()))

    def set_gain(self, source, gain):
        source = Source.parse(source)
        if not isinstance(gain, Gain):
            try:
                gain = Gain(str(gain).upper())
            except ValueError:
                raise ValueError(
                    f"Invalid gain '{gain}'. Must be one of: {[g.value for g in Gain]}"
                ) from None
        self.send_command(f"ACQ:{source.scpi}:GAIN {gain}")

    def set_attenuation(self, source, attenuation):
        if attenuation not in ATTENUATIONS:
            raise ValueError(
                f"Invalid attenuation {attenuation}. Must be one of: {list(ATTENUATIONS)}"
            )
        self.attenuation[Source.parse(source)] = int(attenuation)

    def get_attenuation(self, source):
        return self.attenuation[Source.parse(source)]

    def get_buffer_size(self):
        return self.query("ACQ:BUF:SIZE?", int)

    def read_all(self, source):
        """Read the whole acquisition buffer as the raw ``{v,v,...}`` reply."""
        source = Source.parse(source)
        return self.transport.send_and_receive(f"ACQ:{source.scpi}:DATA?")

    def read_oldest(self, source, n=BUFFER_SIZE):
        """Read the ``n`` oldest samples after the trigger as the raw reply."""
        source = Source.parse(source)
        if n <= 0:
            raise ValueError(f"Sample count must be positive, got {n}")
        return self.transport.send_and_receive(f"ACQ:{source.scpi}:DATA:OLD:N? {n}")
