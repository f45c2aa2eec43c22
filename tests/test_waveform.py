import numpy as np
import pytest

from yellow_pitaya.src.generator import Form
from yellow_pitaya.src.waveform import (
    UnsupportedFormError,
    dc,
    pwm,
    saw_down,
    saw_up,
    sine,
    square,
    synthesize,
    triangle,
)

# Avoid exact zero crossings, where square and pwm are 0.
X = np.linspace(-2.0, 2.0, 4001) + 1e-4


def test_sine_points():
    assert sine(0.0, 1.0, 1.0) == 0.0
    assert sine(0.25, 1.0, 1.0) == pytest.approx(1.0)
    assert sine(0.75, 1.0, 1.0) == pytest.approx(-1.0)


def test_scalar_in_scalar_out():
    assert isinstance(sine(0.1, 1.0, 1.0), float)
    assert isinstance(sine(X, 1.0, 1.0), np.ndarray)


def test_square_is_always_full_scale():
    values = square(X, 1.0, 1.0)
    assert set(np.unique(values)) == {-1.0, 1.0}


def test_square_zero_crossing():
    assert square(0.0, 1.0, 1.0) == 0.0


def test_triangle():
    assert triangle(0.0, 1.0, 1.0) == pytest.approx(0.0)
    assert triangle(0.25, 1.0, 1.0) == pytest.approx(1.0)
    assert triangle(0.125, 1.0, 1.0) == pytest.approx(0.5)
    assert triangle(0.75, 1.0, 1.0) == pytest.approx(-1.0)


def test_saw_up_and_down():
    assert saw_up(0.25, 1.0, 1.0) == pytest.approx(0.25)
    assert saw_up(1.5, 1.0, 1.0) == pytest.approx(0.5)
    assert saw_down(0.25, 1.0, 1.0) == pytest.approx(0.75)


def test_saw_is_periodic_for_negative_time():
    assert saw_up(-0.75, 1.0, 1.0) == pytest.approx(saw_up(0.25, 1.0, 1.0))
    assert saw_down(-0.75, 1.0, 1.0) == pytest.approx(saw_down(0.25, 1.0, 1.0))


def test_dc_ignores_time():
    values = dc(X, 0.4, 1000.0, offset=0.1)
    assert np.allclose(values, 0.5)
    assert values.shape == X.shape


def test_pwm_duty_cycle():
    assert pwm(0.2, 1.0, 1.0, 0.5) == 1.0
    assert pwm(0.7, 1.0, 1.0, 0.5) == -1.0
    assert pwm(0.2, 1.0, 1.0, 0.1) == -1.0


def test_pwm_switches_once_per_period():
    x = np.linspace(0.0, 4.0, 40000, endpoint=False) + 1e-5
    values = pwm(x, 1.0, 1.0, 0.5)
    changes = np.count_nonzero(np.diff(np.sign(values)) != 0)
    # four high-to-low edges and three low-to-high edges inside [0, 4)
    assert changes == 7
    high = np.count_nonzero(values > 0) / len(values)
    assert high == pytest.approx(0.5, abs=1e-3)


@pytest.mark.parametrize("form", [f for f in Form if f != Form.ARBITRARY])
@pytest.mark.parametrize("offset", [-5.0, -1.5, 0.0, 0.9, 3.0])
def test_output_is_clamped(form, offset):
    values = synthesize(form, X, 1.0, 1.0, offset=offset, duty_cycle=0.3)
    assert np.all(values >= -1.0)
    assert np.all(values <= 1.0)


def test_offset_is_added():
    assert sine(0.25, 0.5, 1.0, offset=0.25) == pytest.approx(0.75)
    assert sine(0.25, 0.5, 1.0, offset=0.75) == 1.0


def test_synthesize_dispatch():
    assert synthesize(Form.SINE, 0.25, 1.0, 1.0) == pytest.approx(1.0)
    assert synthesize("sawd", 0.25, 1.0, 1.0) == pytest.approx(0.75)
    assert synthesize(Form.PWM, 0.2, 1.0, 1.0, duty_cycle=0.5) == 1.0


def test_arbitrary_has_no_preview():
    with pytest.raises(UnsupportedFormError):
        synthesize(Form.ARBITRARY, X, 1.0, 1.0)
    assert issubclass(UnsupportedFormError, NotImplementedError)


def test_no_form_selected():
    with pytest.raises(ValueError):
        synthesize(None, X, 1.0, 1.0)
