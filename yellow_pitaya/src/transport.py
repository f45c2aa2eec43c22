"""
Line-oriented SCPI transport to the instrument.
Commands and replies are CRLF-terminated text over a raw TCP socket.
"""

import threading

import pyvisa
from loguru import logger

from .defaults import DEFAULT_PORT, DEFAULT_TIMEOUT_MS, TERMINATION, VISA_BACKEND
from .log import COMMAND_LEVEL, REPLY_LEVEL


class TransportError(ConnectionError):
    """The connection to the instrument failed or was lost."""


class TransportTimeout(TransportError):
    """No reply line arrived within the configured timeout."""


def parse_address(address: str, default_port: int = DEFAULT_PORT):
    """
    Split a ``host[:port]`` address.

    Args:
        address (str): e.g. ``"192.168.1.100:5000"`` or ``"rp-f0a235.local"``.
        default_port (int): Port used when the address has none.

    Returns:
        tuple: (host, port)
    """
    if not address or not address.strip():
        raise ValueError("Address must not be empty.")

    host, sep, port = address.strip().rpartition(":")
    if not sep:
        host, port = port, str(default_port)

    if not host:
        raise ValueError(f"Missing host in address '{address}'.")

    try:
        port = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in address '{address}'.") from None

    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in address '{address}'.")

    return host, port


class Transport:
    """
    Owns the single connection to the instrument.

    The protocol is strictly request then reply, so every exchange holds a lock:
    at most one command is in flight even if several threads share the transport.
    """

    def __init__(
        self,
        address,
        timeout=DEFAULT_TIMEOUT_MS,
        backend=VISA_BACKEND,
        resource_manager=None,
    ):
        self.host, self.port = parse_address(address)
        self.resource_name = f"TCPIP0::{self.host}::{self.port}::SOCKET"
        self.timeout = timeout
        self.backend = backend
        self.rm = resource_manager
        self.instrument = None
        self._lock = threading.Lock()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def is_connected(self):
        return self.instrument is not None

    def connect(self):
        """Opens the socket to the instrument."""
        try:
            if self.rm is None:
                self.rm = pyvisa.ResourceManager(self.backend)
            self.instrument = self.rm.open_resource(self.resource_name)
            self.instrument.timeout = self.timeout
            self.instrument.read_termination = TERMINATION
            self.instrument.write_termination = TERMINATION
        except (pyvisa.errors.Error, OSError, ValueError) as e:
            self.instrument = None
            raise TransportError(
                f"Unable to connect to {self.host}:{self.port}: {e}"
            ) from e
        logger.info("Connected to {}:{}", self.host, self.port)

    def close(self):
        """Closes the socket."""
        if self.instrument:
            try:
                self.instrument.close()
            finally:
                self.instrument = None
            logger.info("Disconnected from {}:{}", self.host, self.port)

    def send(self, command: str):
        """Sends a command without waiting for a reply."""
        with self._lock:
            self._write(command)

    def send_and_receive(self, command: str) -> str:
        """Sends a command and returns the single reply line, CRLF stripped."""
        with self._lock:
            self._write(command)
            return self._read()

    def _write(self, command):
        if self.instrument is None:
            raise TransportError("Instrument not connected.")

        logger.log(COMMAND_LEVEL, "> {}", command)
        try:
            self.instrument.write(command)
        except (pyvisa.errors.Error, OSError) as e:
            raise TransportError(f"Failed to send '{command}': {e}") from e

    def _read(self):
        try:
            message = self.instrument.read()
        except pyvisa.errors.VisaIOError as e:
            if e.error_code == pyvisa.constants.StatusCode.error_timeout:
                raise TransportTimeout(
                    f"No reply from {self.host}:{self.port} within {self.timeout} ms"
                ) from e
            raise TransportError(f"Failed to read reply: {e}") from e
        except OSError as e:
            raise TransportError(f"Failed to read reply: {e}") from e

        message = message.rstrip(TERMINATION)
        logger.log(REPLY_LEVEL, "< {}", message)

        return message
