import pytest

from yellow_pitaya.src.generator import Form, Source as OutputSource
from yellow_pitaya.src.subsystem import check_range
from yellow_pitaya.src.transport import TransportError


def test_getters_return_none_without_reply(redpitaya, log_records):
    assert redpitaya.acquire.get_decimation() is None
    assert redpitaya.acquire.get_gain("IN1") is None
    assert redpitaya.trigger.get_state() is None
    assert redpitaya.generator.get_frequency(OutputSource.OUT1) is None

    errors = [r for r in log_records if r["level"].name == "ERROR"]
    assert len(errors) == 4
    assert "ACQ:DEC?" in errors[0]["message"]


def test_missing_reply_keeps_cached_state(redpitaya):
    generator = redpitaya.generator
    generator.set_form(OutputSource.OUT2, Form.PWM)
    assert generator.get_form(OutputSource.OUT2) is None
    assert generator.state(OutputSource.OUT2).form == Form.PWM


def test_write_failure_is_fatal(redpitaya, resource):
    def broken(message):
        raise OSError("connection reset")

    resource.write = broken
    with pytest.raises(TransportError):
        redpitaya.acquire.get_decimation()


def test_query_after_disconnect_is_fatal(redpitaya):
    redpitaya.disconnect()
    with pytest.raises(TransportError):
        redpitaya.acquire.get_buffer_size()


def test_check_range():
    assert check_range("Delay", 0, 0, 10) == 0
    with pytest.raises(ValueError):
        check_range("Delay", 11, 0, 10)
