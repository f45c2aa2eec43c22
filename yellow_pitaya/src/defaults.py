"""Default settings, overridable through the environment."""

import os

DEFAULT_PORT = 5000
DEFAULT_TIMEOUT_MS = 5000

# pyvisa-py speaks raw TCP sockets without a vendor VISA install.
VISA_BACKEND = os.environ.get("YELLOW_PITAYA_VISA_BACKEND", "@py")

DEFAULT_LOGLEVEL = os.environ.get("YELLOW_PITAYA_LOGLEVEL", "WARNING")

TERMINATION = "\r\n"

BUFFER_SIZE = 16384

VERTICAL_RANGE = (-5.0, 5.0)

GRATICULE_DIVISIONS = 10
