import pytest
import pyvisa

from yellow_pitaya.mock_instruments import get_mock_redpitaya
from yellow_pitaya.repl import PitayaRepl, _channel_number, main


@pytest.fixture
def repl():
    redpitaya = get_mock_redpitaya()
    redpitaya.connect()
    repl = PitayaRepl(redpitaya)
    yield repl
    repl._cleanup_on_exit()


@pytest.fixture
def device(repl):
    """The simulated instrument behind the ``repl`` fixture."""
    return repl.redpitaya.transport.instrument


@pytest.mark.parametrize("text, expected", [("1", 1), ("ch2", 2), ("IN1", 1), ("out2", 2)])
def test_channel_number(text, expected):
    assert _channel_number(text) == expected


def test_channel_number_rejects_others():
    with pytest.raises(ValueError):
        _channel_number("3")


def test_startup_puts_device_in_safe_state(device):
    assert device.written[:2] == ["ACQ:BUF:SIZE?", "ACQ:DEC?"]
    assert device.written[2:] == ["ACQ:STOP", "OUTPUT1:STATE OFF", "OUTPUT2:STATE OFF"]


def test_acq_rate(repl, device, capsys):
    repl.onecmd("acq rate 64")
    assert device.decimation == 64
    assert "1.9 MHz" in capsys.readouterr().out


def test_acq_bad_rate_reports_error(repl, device, capsys):
    repl.onecmd("acq rate 5")
    assert device.decimation == 1
    assert "Invalid decimation" in capsys.readouterr().out


def test_gen_wave(repl, device):
    repl.onecmd("gen wave 1 square freq=2000 amp=0.5 offset=0.1")
    repl.onecmd("gen on 1")
    output = device.outputs[1]
    assert output["form"] == "SQUARE"
    assert output["frequency"] == 2000.0
    assert output["amplitude"] == 0.5
    assert output["offset"] == 0.1
    assert output["state"]


def test_gen_wave_rejects_unknown_key(repl, capsys):
    repl.onecmd("gen wave 1 sine phase=90")
    assert "Invalid parameter" in capsys.readouterr().out


def test_gen_out_of_range(repl, device, capsys):
    repl.onecmd("gen amp 1 2.0")
    assert device.outputs[1]["amplitude"] == 1.0
    assert "Amplitude must be between" in capsys.readouterr().out


def test_trigger_needs_channel_and_edge(repl, device):
    repl.onecmd("trig channel ch1")
    assert device.trigger_source == "DISABLED"
    repl.onecmd("trig edge pos")
    assert device.trigger_source == "CH1_PE"


def test_fetch_all(repl, capsys):
    repl.onecmd("fetch all")
    out = capsys.readouterr().out
    assert "IN1" in out
    assert "IN2" in out
    assert "16384 pts" in out


def test_fetch_single_mode_needs_arming(repl, capsys):
    repl.onecmd("acq start")
    repl.onecmd("trig mode single")
    repl.onecmd("fetch")
    assert "trig single" in capsys.readouterr().out
    repl.onecmd("trig single")
    repl.onecmd("fetch")
    assert "16384 pts" in capsys.readouterr().out


def test_preview(repl, capsys):
    repl.onecmd("preview 1")
    assert "no waveform" in capsys.readouterr().out

    repl.onecmd("gen wave 1 sine freq=100000 amp=0.5")
    repl.onecmd("preview 1 4")
    lines = [line for line in capsys.readouterr().out.splitlines() if "µs" in line]
    assert len(lines) == 4


def test_level_and_scales(repl, capsys):
    repl.onecmd("level trig 0")
    assert "TRIG at 5.000 V" in capsys.readouterr().out
    repl.onecmd("scales")
    assert "125 MHz" in capsys.readouterr().out


def test_raw(repl, device, capsys):
    repl.onecmd("raw *IDN?")
    assert "REDPITAYA" in capsys.readouterr().out
    repl.onecmd("raw ACQ:START")
    assert device.started


def test_quit_cleans_up(repl, device):
    repl.onecmd("gen on 2")
    assert repl.onecmd("quit") is True
    assert not device.outputs[2]["state"]
    assert not repl.redpitaya.transport.is_connected


def test_main_requires_address():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_main_rejects_bad_address(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["rp-f0a235.local:notaport"])
    assert exc.value.code == 1
    assert "Invalid port" in capsys.readouterr().out


def test_fetch_while_stopped(repl, device, capsys):
    device.written.clear()
    repl.onecmd("fetch")
    assert "acq start" in capsys.readouterr().out
    assert device.written == []


def test_gen_frequency_is_whole_hz(repl, device):
    repl.onecmd("gen freq 1 2000")
    repl.onecmd("gen wave 2 sine freq=1500.0")
    assert "SOUR1:FREQ:FIX 2000" in device.written
    assert "SOUR2:FREQ:FIX 1500" in device.written


def test_usage_line_without_arguments(repl, capsys):
    repl._print_colored_usage(["<points>", "preview <1|2>"])
    out = capsys.readouterr().out
    assert "<points>" in out
    assert "<1|2>" in out


def test_status_survives_missing_reply(repl, device, monkeypatch, capsys):
    def silent():
        raise pyvisa.errors.VisaIOError(pyvisa.constants.StatusCode.error_timeout)

    monkeypatch.setattr(device, "read", silent)
    assert repl.onecmd("acq status") is None
    out = capsys.readouterr().out
    assert "rate" in out
    assert "?" in out
    assert repl.redpitaya.transport.is_connected
