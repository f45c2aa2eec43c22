"""
Simulated Red Pitaya for running the REPL without hardware.

Usage:
    yellow-pitaya --mock
"""

import re
from collections import deque

import numpy as np
import pyvisa
from loguru import logger

from .src.acquire import SamplingRate
from .src.buffer import format_buffer
from .src.defaults import BUFFER_SIZE
from .src.redpitaya import Redpitaya
from .src.waveform import UnsupportedFormError, synthesize

_ACQ_SOURCE = re.compile(r"^ACQ:SOUR([12]):(.+)$")
_OUTPUT = re.compile(r"^OUTPUT([12]):(STATE|FUNC)$")
_SOURCE = re.compile(r"^SOUR([12]):(VOLT|VOLT:OFFS|FREQ:FIX|DCYC)$")

_OUTPUT_FIELDS = {
    "VOLT": "amplitude",
    "VOLT:OFFS": "offset",
    "FREQ:FIX": "frequency",
    "DCYC": "duty_cycle",
}


class MockRedpitayaResource:
    """
    Stands in for a pyvisa socket resource. Writes are interpreted as SCPI;
    each query queues one reply for the next ``read()``.
    """

    def __init__(self, resource_name, seed=0):
        self.resource_name = resource_name
        self.timeout = None
        self.read_termination = None
        self.write_termination = None
        self.written = []
        self._replies = deque()
        self._rng = np.random.default_rng(seed)

        self.started = False
        self.decimation = 1
        self.average = False
        self.units = "VOLTS"
        self.gain = {1: "LV", 2: "LV"}
        self.trigger_source = "DISABLED"
        self.trigger_level = 0.0
        self.trigger_delay = 0
        self.outputs = {
            n: {
                "state": False,
                "form": "SINE",
                "amplitude": 1.0,
                "offset": 0.0,
                "frequency": 1000.0,
                "duty_cycle": 0.5,
            }
            for n in (1, 2)
        }

    def close(self):
        pass

    def write(self, message):
        self.written.append(message)
        command, _, arg = message.strip().partition(" ")
        command = command.upper()
        try:
            if command.endswith("?"):
                self._replies.append(self._query(command[:-1], arg.strip()))
            else:
                self._set(command, arg.strip())
        except ValueError as e:
            # the device drops malformed commands without a reply
            logger.debug("Mock ignores '{}': {}", message, e)

    def read(self):
        if not self._replies:
            raise pyvisa.errors.VisaIOError(pyvisa.constants.StatusCode.error_timeout)
        return self._replies.popleft()

    def _set(self, command, arg):
        if command == "ACQ:START":
            self.started = True
        elif command == "ACQ:STOP":
            self.started = False
        elif command == "ACQ:RST":
            self.decimation = 1
            self.average = False
            self.trigger_source = "DISABLED"
        elif command == "ACQ:DATA:UNITS":
            self.units = arg.upper()
        elif command == "ACQ:DEC":
            decimation = int(arg)
            if decimation in (rate.decimation for rate in SamplingRate):
                self.decimation = decimation
            else:
                logger.debug("Mock ignores unsupported decimation {}", decimation)
        elif command == "ACQ:AVG":
            self.average = arg.upper() == "ON"
        elif command == "ACQ:TRIG":
            self.trigger_source = arg.upper()
        elif command == "ACQ:TRIG:LEV":
            self.trigger_level = float(arg)
        elif command == "ACQ:TRIG:DLY":
            self.trigger_delay = int(arg)
        elif _ACQ_SOURCE.match(command):
            n, field = _ACQ_SOURCE.match(command).groups()
            if field == "GAIN":
                self.gain[int(n)] = arg.upper()
        elif _OUTPUT.match(command):
            n, field = _OUTPUT.match(command).groups()
            output = self.outputs[int(n)]
            if field == "STATE":
                output["state"] = arg.upper() == "ON"
            else:
                output["form"] = arg.upper()
        elif _SOURCE.match(command):
            n, field = _SOURCE.match(command).groups()
            self.outputs[int(n)][_OUTPUT_FIELDS[field]] = float(arg)
        else:
            logger.debug("Mock ignores '{}'", command)

    def _query(self, command, arg):
        if command == "*IDN":
            return "REDPITAYA,INSTR2014,0,01-02"
        if command == "ACQ:DEC":
            return str(self.decimation)
        if command == "ACQ:AVG":
            return "ON" if self.average else "OFF"
        if command == "ACQ:BUF:SIZE":
            return str(BUFFER_SIZE)
        if command == "ACQ:TRIG:STAT":
            return "TD" if self.started else "WAIT"
        if command == "ACQ:TRIG:LEV":
            return str(self.trigger_level)
        if command == "ACQ:TRIG:DLY":
            return str(self.trigger_delay)

        match = _ACQ_SOURCE.match(command)
        if match:
            n, field = match.groups()
            if field == "GAIN":
                return self.gain[int(n)]
            if field == "DATA":
                return self._data(int(n), BUFFER_SIZE)
            if field == "DATA:OLD:N":
                return self._data(int(n), int(arg))

        match = _OUTPUT.match(command)
        if match:
            n, field = match.groups()
            output = self.outputs[int(n)]
            if field == "STATE":
                return "ON" if output["state"] else "OFF"
            return output["form"]

        match = _SOURCE.match(command)
        if match:
            n, field = match.groups()
            return str(self.outputs[int(n)][_OUTPUT_FIELDS[field]])

        return "ERR!"

    def _data(self, n, count):
        """Input n sees output n looped back, plus a little noise."""
        count = max(0, min(count, BUFFER_SIZE))
        duration = SamplingRate.from_decimation(self.decimation).buffer_duration
        time = (np.arange(count) / BUFFER_SIZE - 0.5) * duration

        output = self.outputs[n]
        samples = np.zeros(count)
        if output["state"]:
            try:
                samples = synthesize(
                    output["form"],
                    time,
                    output["amplitude"],
                    output["frequency"] / 1_000_000.0,
                    offset=output["offset"],
                    duty_cycle=output["duty_cycle"],
                )
            except UnsupportedFormError:
                logger.debug("Mock has no table for OUT{}, playing silence", n)
        samples = samples + 0.002 * self._rng.standard_normal(count)

        return format_buffer(samples, digits=4)


class MockResourceManager:
    """Hands out MockRedpitayaResource instances in place of pyvisa's manager."""

    def __init__(self):
        self.opened = []

    def open_resource(self, resource_name):
        resource = MockRedpitayaResource(resource_name)
        self.opened.append(resource)
        return resource

    def list_resources(self, query="?*::INSTR"):
        return tuple(resource.resource_name for resource in self.opened)


def get_mock_redpitaya(address="localhost:5000", timeout=1000):
    """Build an unconnected Redpitaya wired to the simulator."""
    return Redpitaya(address, timeout=timeout, resource_manager=MockResourceManager())
