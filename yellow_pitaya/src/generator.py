"""
Signal generator subsystem: two analog outputs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .subsystem import Subsystem, check_range

AMPLITUDE_RANGE = (-1.0, 1.0)
OFFSET_RANGE = (-1.0, 1.0)
FREQUENCY_RANGE = (0, 62_500_000)
DUTY_CYCLE_RANGE = (0.0, 1.0)


class Source(Enum):
    OUT1 = 1
    OUT2 = 2

    def __str__(self):
        return self.name

    @property
    def scpi(self):
        return f"SOUR{self.value}"

    @property
    def output(self):
        return f"OUTPUT{self.value}"

    @classmethod
    def parse(cls, value):
        """Accepts a Source, its name ("OUT1", "out2") or its number."""
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


class Form(Enum):
    SINE = "SINE"
    SQUARE = "SQUARE"
    TRIANGLE = "TRIANGLE"
    SAWU = "SAWU"
    SAWD = "SAWD"
    DC = "DC"
    PWM = "PWM"
    # Accepted by the device; uploading a custom table is not supported here.
    ARBITRARY = "ARBITRARY"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Invalid form '{value}'. Must be one of: {[f.value for f in cls]}"
            ) from None


@dataclass
class OutputState:
    """Last known parameters of one output, as set or read back."""

    form: Optional[Form] = None
    amplitude: float = 0.0
    offset: float = 0.0
    frequency: float = 0.0
    duty_cycle: float = 0.0
    started: bool = False


class Generator(Subsystem):
    """
    Generator commands (``OUTPUTn:*`` and ``SOURn:*``).

    Every setter and every successful getter updates the cached OutputState of
    its source, which the waveform preview reads without touching the wire. A
    failed getter leaves the cached value untouched.
    """

    def __init__(self, transport):
        super().__init__(transport)
        self.states = {source: OutputState() for source in Source}

    def state(self, source) -> OutputState:
        return self.states[Source.parse(source)]

    # ==========================================
    # OUTPUT CONTROL
    # ==========================================

    def start(self, source):
        source = Source.parse(source)
        self.send_command(f"{source.output}:STATE ON")
        self.states[source].started = True

    def stop(self, source):
        source = Source.parse(source)
        self.send_command(f"{source.output}:STATE OFF")
        self.states[source].started = False

    def is_started(self, source) -> bool:
        return self.state(source).started

    # ==========================================
    # WAVEFORM CONFIGURATION
    # ==========================================

    def set_form(self, source, form):
        source = Source.parse(source)
        form = Form.parse(form)
        self.send_command(f"{source.output}:FUNC {form}")
        self.states[source].form = form

    def get_form(self, source):
        source = Source.parse(source)
        form = self.query(f"{source.output}:FUNC?", lambda reply: Form(reply.upper()))
        return self._remember(source, "form", form)

    def set_amplitude(self, source, amplitude):
        """Set the amplitude in volts, within [-1, 1]."""
        source = Source.parse(source)
        check_range("Amplitude", amplitude, *AMPLITUDE_RANGE)
        self.send_command(f"{source.scpi}:VOLT {amplitude}")
        self.states[source].amplitude = float(amplitude)

    def get_amplitude(self, source):
        source = Source.parse(source)
        return self._remember(
            source, "amplitude", self.query(f"{source.scpi}:VOLT?", float)
        )

    def set_offset(self, source, offset):
        """Set the DC offset in volts, within [-1, 1]."""
        source = Source.parse(source)
        check_range("Offset", offset, *OFFSET_RANGE)
        self.send_command(f"{source.scpi}:VOLT:OFFS {offset}")
        self.states[source].offset = float(offset)

    def get_offset(self, source):
        source = Source.parse(source)
        return self._remember(
            source, "offset", self.query(f"{source.scpi}:VOLT:OFFS?", float)
        )

    def set_frequency(self, source, frequency):
        """Set the frequency in Hz, within [0, 62.5 MHz]."""
        source = Source.parse(source)
        check_range("Frequency", frequency, *FREQUENCY_RANGE)
        # the device takes a whole number of Hz
        if float(frequency).is_integer():
            frequency = int(frequency)
        self.send_command(f"{source.scpi}:FREQ:FIX {frequency}")
        self.states[source].frequency = float(frequency)

    def get_frequency(self, source):
        source = Source.parse(source)
        return self._remember(
            source, "frequency", self.query(f"{source.scpi}:FREQ:FIX?", float)
        )

    def set_duty_cycle(self, source, duty_cycle):
        """Set the PWM duty cycle as a fraction of the period, within [0, 1]."""
        source = Source.parse(source)
        check_range("Duty cycle", duty_cycle, *DUTY_CYCLE_RANGE)
        self.send_command(f"{source.scpi}:DCYC {duty_cycle}")
        self.states[source].duty_cycle = float(duty_cycle)

    def get_duty_cycle(self, source):
        source = Source.parse(source)
        return self._remember(
            source, "duty_cycle", self.query(f"{source.scpi}:DCYC?", float)
        )

    def refresh(self, source) -> OutputState:
        """Read every parameter of ``source`` back from the device."""
        self.get_form(source)
        self.get_amplitude(source)
        self.get_offset(source)
        self.get_frequency(source)
        self.get_duty_cycle(source)
        return self.state(source)

    def _remember(self, source, field, value):
        if value is not None:
            setattr(self.states[source], field, value)
        return value
