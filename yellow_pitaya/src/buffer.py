"""
Parser for acquisition buffer replies.

The device answers a data query with one line such as ``{0.12,0.13,-0.02}``,
sometimes preceded by a marker character (``!``).
"""

import numpy as np
from loguru import logger

_MARKER = "!"


def strip_envelope(reply: str) -> str:
    """
    Remove the braces and any marker prefix before the opening brace.

    Tokens at either end are left as written, so a corrupted first or last
    value still reaches the parser and gets logged.
    """
    text = reply.strip()
    _, brace, body = text.partition("{")
    if brace:
        text = body
    else:
        text = text.lstrip(_MARKER)
    if text.endswith("}"):
        text = text[:-1]
    return text.strip()


def parse_buffer(reply: str, expected=None) -> np.ndarray:
    """
    Convert a raw data reply into samples.

    A token that is not a number becomes 0.0 and is logged, so one corrupted
    value keeps the rest of the trace aligned. Short replies are returned as is,
    without padding.

    Args:
        reply (str): The raw reply line.
        expected (int, optional): Expected sample count; a mismatch is logged.

    Returns:
        numpy.ndarray: float64 samples, in device order.
    """
    body = strip_envelope(reply)
    if not body:
        samples = np.empty(0)
    else:
        values = []
        for token in body.split(","):
            try:
                values.append(float(token))
            except ValueError:
                logger.error("Invalid data '{}'", token)
                values.append(0.0)
        samples = np.array(values, dtype=float)

    if expected is not None and len(samples) != expected:
        logger.warning("Expected {} samples, got {}", expected, len(samples))

    return samples


def format_buffer(samples, marker="", digits=None) -> str:
    """Render samples in the device's reply envelope."""
    if digits is None:
        tokens = (repr(float(s)) for s in samples)
    else:
        tokens = (f"{float(s):.{digits}f}" for s in samples)
    return marker + "{" + ",".join(tokens) + "}"
