"""
Driver for the Red Pitaya oscilloscope / signal generator board.
Instrument Type: 2-channel oscilloscope + 2-channel arbitrary waveform generator

Protocol: SCPI text over a raw TCP socket (default port 5000), CRLF-terminated
"""

from .acquire import Acquire
from .defaults import DEFAULT_TIMEOUT_MS, VISA_BACKEND
from .generator import Generator, Source as OutputSource
from .transport import Transport
from .trigger import Trigger


class Redpitaya:
    """
    The instrument: one Transport shared by the acquisition, generator and
    trigger subsystems.
    """

    def __init__(
        self,
        address,
        timeout=DEFAULT_TIMEOUT_MS,
        backend=VISA_BACKEND,
        resource_manager=None,
    ):
        self.transport = Transport(
            address,
            timeout=timeout,
            backend=backend,
            resource_manager=resource_manager,
        )
        self.acquire = Acquire(self.transport)
        self.generator = Generator(self.transport)
        self.trigger = Trigger(self.transport)

    @property
    def address(self):
        return f"{self.transport.host}:{self.transport.port}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            if self.transport.is_connected:
                self.safe_state()
        finally:
            self.disconnect()

    def connect(self):
        self.transport.connect()

    def disconnect(self):
        self.transport.close()

    def safe_state(self):
        """Stop acquisition and switch both generator outputs off."""
        self.acquire.stop()
        for source in OutputSource:
            self.generator.stop(source)
