__version__ = "0.1.0"

from .src.acquire import Acquire, Gain, SamplingRate, Units
from .src.acquire import Source as InputSource
from .src.buffer import parse_buffer
from .src.generator import Form, Generator, OutputState
from .src.generator import Source as OutputSource
from .src.graph import Graph, Trace
from .src.redpitaya import Redpitaya
from .src.scales import Rect, Scales
from .src.session import Session
from .src.terminal import ColorPrinter
from .src.transport import Transport, TransportError, TransportTimeout
from .src.trigger import Channel, Edge, Mode, Trigger, trigger_source
from .src.waveform import UnsupportedFormError, synthesize

__all__ = [
    "Acquire",
    "Gain",
    "SamplingRate",
    "Units",
    "InputSource",
    "parse_buffer",
    "Form",
    "Generator",
    "OutputState",
    "OutputSource",
    "Graph",
    "Trace",
    "Redpitaya",
    "Rect",
    "Scales",
    "Session",
    "ColorPrinter",
    "Transport",
    "TransportError",
    "TransportTimeout",
    "Channel",
    "Edge",
    "Mode",
    "Trigger",
    "trigger_source",
    "UnsupportedFormError",
    "synthesize",
]
