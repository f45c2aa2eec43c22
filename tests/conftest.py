from collections import deque

import pytest
import pyvisa
from loguru import logger

from yellow_pitaya.src.redpitaya import Redpitaya
from yellow_pitaya.src.transport import Transport


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "hardware: marks test that require a physical Red Pitaya"
    )


class FakeResource:
    """
    Stands in for a pyvisa socket resource: records every write and answers
    ``read()`` from a queue of scripted replies.
    """

    def __init__(self, resource_name):
        self.resource_name = resource_name
        self.timeout = None
        self.read_termination = None
        self.write_termination = None
        self.written = []
        self.replies = deque()
        self.responder = None
        self.closed = False

    def reply(self, *lines):
        """Script the next replies, oldest first."""
        self.replies.extend(lines)

    def write(self, message):
        self.written.append(message)
        if self.responder is not None and message.split(" ", 1)[0].endswith("?"):
            self.replies.append(self.responder(message))

    def read(self):
        if not self.replies:
            raise pyvisa.errors.VisaIOError(pyvisa.constants.StatusCode.error_timeout)
        return self.replies.popleft()

    def close(self):
        self.closed = True


class FakeResourceManager:
    def __init__(self):
        self.resource = None
        self.fail_with = None

    def open_resource(self, resource_name):
        if self.fail_with is not None:
            raise self.fail_with
        self.resource = FakeResource(resource_name)
        return self.resource


@pytest.fixture
def fake_rm():
    return FakeResourceManager()


@pytest.fixture
def transport(fake_rm):
    transport = Transport("rp-f0a235.local:5000", resource_manager=fake_rm)
    transport.connect()
    yield transport
    transport.close()


@pytest.fixture
def redpitaya(fake_rm):
    redpitaya = Redpitaya("rp-f0a235.local", resource_manager=fake_rm)
    redpitaya.connect()
    yield redpitaya
    redpitaya.disconnect()


@pytest.fixture
def resource(fake_rm, redpitaya):
    """The fake socket behind the ``redpitaya`` fixture."""
    return fake_rm.resource


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
