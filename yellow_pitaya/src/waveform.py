"""
Closed-form preview of the generator outputs.

Every function takes the time ``x`` (scalar or numpy array), an amplitude in
volts and a frequency in cycles per unit of ``x``, adds ``offset`` and clips
the result to the output range [-1, 1] V.
"""

import numpy as np

from .generator import Form

OUTPUT_RANGE = (-1.0, 1.0)


class UnsupportedFormError(NotImplementedError):
    """The waveform form has no preview (ARBITRARY)."""


def _output(y, offset):
    y = np.clip(y + offset, *OUTPUT_RANGE)
    if np.ndim(y) == 0:
        return float(y)
    return y


def _fract(value):
    # Floored, so the sawtooth keeps its period for negative times too.
    return value - np.floor(value)


def _sine(x, amplitude, frequency):
    return amplitude * np.sin(2.0 * np.pi * frequency * np.asarray(x, dtype=float))


def _saw_up(x, amplitude, frequency):
    return amplitude * _fract(frequency * np.asarray(x, dtype=float))


def sine(x, amplitude, frequency, offset=0.0):
    return _output(_sine(x, amplitude, frequency), offset)


def square(x, amplitude, frequency, offset=0.0):
    return _output(amplitude * np.sign(_sine(x, amplitude, frequency)), offset)


def triangle(x, amplitude, frequency, offset=0.0):
    phase = 2.0 * np.pi * frequency * np.asarray(x, dtype=float)
    return _output(amplitude * (2.0 / np.pi) * np.arcsin(np.sin(phase)), offset)


def saw_up(x, amplitude, frequency, offset=0.0):
    return _output(_saw_up(x, amplitude, frequency), offset)


def saw_down(x, amplitude, frequency, offset=0.0):
    return _output(
        amplitude * (1.0 - _fract(frequency * np.asarray(x, dtype=float))), offset
    )


def dc(x, amplitude, frequency, offset=0.0):
    return _output(np.full(np.shape(x), amplitude, dtype=float), offset)


def pwm(x, amplitude, frequency, duty_cycle, offset=0.0):
    """High (+A) while the rising sawtooth is below A * duty_cycle, low (-A) after."""
    threshold = _saw_up(x, amplitude, frequency) - amplitude * duty_cycle
    return _output(-amplitude * np.sign(threshold), offset)


_FORMS = {
    Form.SINE: sine,
    Form.SQUARE: square,
    Form.TRIANGLE: triangle,
    Form.SAWU: saw_up,
    Form.SAWD: saw_down,
    Form.DC: dc,
}


def synthesize(form, x, amplitude, frequency, offset=0.0, duty_cycle=0.0):
    """
    Evaluate ``form`` at ``x``.

    Raises:
        UnsupportedFormError: For Form.ARBITRARY.
        ValueError: If no form is selected.
    """
    if form is None:
        raise ValueError("No waveform form selected.")

    form = Form.parse(form)
    if form == Form.PWM:
        return pwm(x, amplitude, frequency, duty_cycle, offset=offset)
    if form not in _FORMS:
        raise UnsupportedFormError(f"No preview available for {form} waveforms.")

    return _FORMS[form](x, amplitude, frequency, offset=offset)
