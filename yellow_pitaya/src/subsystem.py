"""Base class for the command groups that share one transport."""

from loguru import logger

from .transport import TransportTimeout


class Subsystem:
    """
    A typed group of instrument commands (acquisition, generator, trigger).

    Subsystems hold a reference to the shared Transport; they never own a
    connection of their own.
    """

    def __init__(self, transport):
        self.transport = transport

    def send_command(self, command):
        """Sends a command to the instrument without waiting for a response."""
        self.transport.send(command)

    def query(self, command, parse=str):
        """
        Sends a query and parses the reply.

        Connection and write failures propagate. A missing reply, or one that
        ``parse`` rejects, is logged and yields None, so one bad reading does
        not end the session.
        """
        try:
            reply = self.transport.send_and_receive(command)
        except TransportTimeout as e:
            logger.error("No reply to '{}': {}", command, e)
            return None

        try:
            return parse(reply.strip())
        except (ValueError, TypeError, KeyError) as e:
            logger.error("Invalid reply '{}' to '{}': {}", reply, command, e)
            return None


def check_range(name, value, low, high):
    """Raise ValueError unless low <= value <= high."""
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
    return value
