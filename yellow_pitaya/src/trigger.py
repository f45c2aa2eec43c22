"""
Trigger subsystem.
"""

from enum import Enum

from .subsystem import Subsystem, check_range

DELAY_RANGE = (0, 131072)


class Channel(Enum):
    CH1 = "CH1"
    CH2 = "CH2"
    EXT = "EXT"

    def __str__(self):
        return self.value


class Edge(Enum):
    Positive = "PE"
    Negative = "NE"

    def __str__(self):
        return self.name


class Mode(Enum):
    Auto = "Auto"
    Normal = "Normal"
    Single = "Single"

    def __str__(self):
        return self.value


class Source(Enum):
    """Device-level trigger sources: one per channel and edge."""

    CH1_PE = "CH1_PE"
    CH1_NE = "CH1_NE"
    CH2_PE = "CH2_PE"
    CH2_NE = "CH2_NE"
    EXT_PE = "EXT_PE"
    EXT_NE = "EXT_NE"

    def __str__(self):
        return self.value


def trigger_source(channel, edge):
    """
    Combine a channel and an edge into a device trigger source.

    Returns:
        Source: e.g. ``Source.CH2_NE``, or None while either half is unselected.
    """
    if channel is None or edge is None:
        return None
    return Source(f"{parse_channel(channel)}_{parse_edge(edge).value}")


def _parse_enum(enum, value, what):
    if isinstance(value, enum):
        return value
    text = str(value).strip()
    for member in enum:
        if text.upper() in (member.name.upper(), member.value.upper()):
            return member
    raise ValueError(
        f"Invalid {what} '{value}'. Must be one of: {[m.name for m in enum]}"
    )


def parse_channel(value):
    return _parse_enum(Channel, value, "trigger channel")


def parse_edge(value):
    return _parse_enum(Edge, value, "trigger edge")


def parse_mode(value):
    return _parse_enum(Mode, value, "trigger mode")


class Trigger(Subsystem):
    """Trigger commands (``ACQ:TRIG*``)."""

    def enable(self, source):
        """Arm the trigger on one of the six channel/edge sources."""
        source = _parse_enum(Source, source, "trigger source")
        self.send_command(f"ACQ:TRIG {source}")

    def disable(self):
        self.send_command("ACQ:TRIG DISABLED")

    def now(self):
        """Force an immediate trigger."""
        self.send_command("ACQ:TRIG NOW")

    def get_state(self):
        """
        Returns:
            str: "TD" once triggered, "WAIT" while armed, None on a bad reply.
        """
        def parse(reply):
            if reply not in ("TD", "WAIT"):
                raise ValueError(f"unknown trigger state {reply!r}")
            return reply

        return self.query("ACQ:TRIG:STAT?", parse)

    def set_level(self, level):
        """Set the trigger level in volts."""
        self.send_command(f"ACQ:TRIG:LEV {level}")

    def get_level(self):
        return self.query("ACQ:TRIG:LEV?", float)

    def set_delay_in_ns(self, delay):
        """
        Set the trigger delay.

        Args:
            delay (int): Delay in device ticks, within [0, 131072].
        """
        check_range("Delay", delay, *DELAY_RANGE)
        self.send_command(f"ACQ:TRIG:DLY {int(delay)}")

    def get_delay(self):
        return self.query("ACQ:TRIG:DLY?", int)
