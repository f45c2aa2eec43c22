"""
The core side of the application loop.

A Session ties one instrument to the graph model. It runs no timer of its own:
the UI layer calls ``tick()`` from whatever periodic callback it owns.
"""

from loguru import logger

from .acquire import SamplingRate, Source as InputSource
from .buffer import parse_buffer
from .defaults import BUFFER_SIZE
from .generator import Source as OutputSource
from .graph import Graph
from .scales import Scales
from .transport import TransportTimeout
from .trigger import Mode, parse_channel, parse_edge, parse_mode, trigger_source
from .waveform import UnsupportedFormError


class Session:
    def __init__(self, redpitaya, mode=Mode.Normal):
        self.redpitaya = redpitaya

        n_samples = redpitaya.acquire.get_buffer_size()
        if not n_samples or n_samples <= 0:
            logger.warning("Unknown buffer size, assuming {} samples", BUFFER_SIZE)
            n_samples = BUFFER_SIZE

        rate = redpitaya.acquire.get_decimation()
        if rate is None:
            rate = SamplingRate.RATE_125MHz
            logger.warning("Unknown decimation, assuming {}", rate)

        self.graph = Graph(Scales(n_samples=n_samples), rate)
        self.mode = parse_mode(mode)
        self.trigger_channel = None
        self.trigger_edge = None
        self.visible = set()
        self.data = {}
        self.armed = False

    @property
    def acquire(self):
        return self.redpitaya.acquire

    @property
    def generator(self):
        return self.redpitaya.generator

    @property
    def trigger(self):
        return self.redpitaya.trigger

    # ==========================================
    # DISPLAY
    # ==========================================

    def set_rate(self, rate):
        if not isinstance(rate, SamplingRate):
            rate = SamplingRate.from_decimation(rate)
        self.acquire.set_decimation(rate)
        self.graph.set_rate(rate)

    def resize(self, width, height):
        self.graph.resize(width, height)

    def set_level(self, channel, pixel):
        self.graph.set_level(channel, pixel)

    def show_input(self, source):
        self.visible.add(InputSource.parse(source))

    def hide_input(self, source):
        self.visible.discard(InputSource.parse(source))

    def status(self):
        return self.graph.status()

    # ==========================================
    # TRIGGER
    # ==========================================

    def set_mode(self, mode):
        self.mode = parse_mode(mode)

    def set_trigger_channel(self, channel):
        self.trigger_channel = parse_channel(channel)
        return self._enable_trigger()

    def set_trigger_edge(self, edge):
        self.trigger_edge = parse_edge(edge)
        return self._enable_trigger()

    def _enable_trigger(self):
        source = trigger_source(self.trigger_channel, self.trigger_edge)
        if source is not None:
            self.trigger.enable(source)
        return source

    # ==========================================
    # DATA
    # ==========================================

    def fetch(self, oldest=False):
        """
        Read both inputs and replace the held buffers. An input whose read
        times out keeps its previous buffer.

        Args:
            oldest (bool): Read the ``n_samples`` oldest samples instead of the
                whole buffer.
        """
        n_samples = self.graph.scales.n_samples
        for source in InputSource:
            try:
                if oldest:
                    reply = self.acquire.read_oldest(source, n_samples)
                else:
                    reply = self.acquire.read_all(source)
            except TransportTimeout as e:
                logger.error("No buffer from {}, keeping the last one: {}", source, e)
                continue
            self.data[source] = parse_buffer(reply, expected=n_samples)
        return self.data

    def tick(self):
        """
        Periodic refresh, only while acquisition is started. Auto reads the
        whole buffer, Normal the oldest samples; Single reads once after
        ``single()`` has armed it.

        Returns:
            dict: The fresh buffers, or None if nothing was read.
        """
        if not self.acquire.is_started():
            return None
        if self.mode == Mode.Auto:
            return self.fetch()
        if self.mode == Mode.Normal:
            return self.fetch(oldest=True)
        if self.armed:
            self.armed = False
            return self.fetch()
        return None

    def single(self):
        """Arm one acquisition; the next tick in Single mode reads it."""
        self.armed = True

    def traces(self):
        """Every trace to draw: shown inputs holding data and started outputs."""
        traces = []
        for source in InputSource:
            if source in self.visible and source in self.data:
                traces.append(
                    self.graph.acquisition_trace(
                        source, self.data[source], self.acquire.get_attenuation(source)
                    )
                )
        for source in OutputSource:
            state = self.generator.state(source)
            if not state.started or state.form is None:
                continue
            try:
                traces.append(self.graph.generator_trace(source, state))
            except UnsupportedFormError:
                logger.warning("No preview for {} ({})", source, state.form)
        return traces

    def quit(self):
        self.redpitaya.safe_state()
