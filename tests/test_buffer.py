import numpy as np
import pytest

from yellow_pitaya.src.buffer import format_buffer, parse_buffer, strip_envelope


def test_parse_plain_reply():
    samples = parse_buffer("{1.0,2.0,-3.5}")
    assert samples.tolist() == [1.0, 2.0, -3.5]
    assert samples.dtype == np.float64


def test_parse_formatted_reply():
    reply = format_buffer([1.0, 2.0, -3.5])
    assert parse_buffer(reply).tolist() == [1.0, 2.0, -3.5]


def test_corrupted_token_keeps_alignment(log_records):
    samples = parse_buffer("{1.0,xx,-3.5}")
    assert samples.tolist() == [1.0, 0.0, -3.5]

    errors = [r for r in log_records if r["level"].name == "ERROR"]
    assert len(errors) == 1
    assert "xx" in errors[0]["message"]


@pytest.mark.parametrize(
    "reply",
    ["!{0.5,-0.5}", "{0.5,-0.5}\r\n", "ERR!{0.5,-0.5}", "  {0.5,-0.5}  "],
)
def test_envelope_markers_are_stripped(reply):
    assert parse_buffer(reply).tolist() == [0.5, -0.5]


def test_strip_envelope_keeps_exponents():
    assert strip_envelope("{1e-3,2E+2}") == "1e-3,2E+2"
    assert parse_buffer("{1e-3,2E+2}").tolist() == [0.001, 200.0]


def test_empty_reply():
    assert len(parse_buffer("{}")) == 0


def test_short_reply_is_not_padded(log_records):
    samples = parse_buffer("{1.0,2.0}", expected=16384)
    assert len(samples) == 2
    assert any(r["level"].name == "WARNING" for r in log_records)


def test_format_with_digits():
    assert format_buffer([0.123456, -1], digits=3) == "{0.123,-1.000}"
    assert format_buffer([1.5], marker="!") == "!{1.5}"


@pytest.mark.parametrize(
    "reply, bad_token",
    [
        ("{1.0,2.0,1.0e}", "1.0e"),
        ("{x1.0,2.0,3.0}", "x1.0"),
        ("!{1.0,2.0,V}", "V"),
    ],
)
def test_corrupted_edge_token_is_logged(log_records, reply, bad_token):
    samples = parse_buffer(reply)
    assert len(samples) == 3
    assert 0.0 in samples.tolist()

    errors = [r["message"] for r in log_records if r["level"].name == "ERROR"]
    assert errors == [f"Invalid data '{bad_token}'"]


def test_strip_envelope_only_removes_braces_and_prefix():
    assert strip_envelope("ERR!{nan,1.0e}") == "nan,1.0e"
    assert strip_envelope("!0.5,0.6") == "0.5,0.6"
