#!/usr/bin/env python3
"""
Interactive REPL for the Red Pitaya.

Use to configure acquisition, trigger and generator, pull buffers and preview
generator output without a GUI.
"""

import argparse
import atexit
import cmd
import shlex
import sys

import numpy as np
from loguru import logger

from .src.acquire import Source as InputSource
from .src.generator import Source as OutputSource
from .src.log import level_from_verbosity, start_log
from .src.redpitaya import Redpitaya
from .src.session import Session
from .src.terminal import ColorPrinter
from .src.transport import TransportError

# Maps user-friendly keys in "gen wave" to generator setters
GEN_WAVE_KEYS = {
    "freq": "frequency",
    "frequency": "frequency",
    "amp": "amplitude",
    "amplitude": "amplitude",
    "offset": "offset",
    "duty": "duty_cycle",
}

# Maps user-friendly waveform names to device forms
GEN_FORM_ALIASES = {
    "sine": "SINE",
    "sin": "SINE",
    "square": "SQUARE",
    "squ": "SQUARE",
    "triangle": "TRIANGLE",
    "tri": "TRIANGLE",
    "sawu": "SAWU",
    "ramp": "SAWU",
    "sawd": "SAWD",
    "dc": "DC",
    "pwm": "PWM",
    "arb": "ARBITRARY",
}

DEFAULT_PREVIEW_COLUMNS = 800
DEFAULT_PREVIEW_ROWS = 600


def _channel_number(text):
    """Accept '1', 'ch1', 'in1', 'out1' and friends."""
    digits = text.lower().lstrip("chinout")
    if digits not in ("1", "2"):
        raise ValueError(f"Invalid channel '{text}'. Must be one of: ['1', '2']")
    return int(digits)


class PitayaRepl(cmd.Cmd):
    intro = "Red Pitaya REPL. Type 'help' for commands."
    prompt = "pitaya> "

    def __init__(self, redpitaya):
        super().__init__()
        self.redpitaya = redpitaya
        self.session = Session(redpitaya)
        self.session.resize(DEFAULT_PREVIEW_COLUMNS, DEFAULT_PREVIEW_ROWS)
        for source in InputSource:
            self.session.show_input(source)
        self._cleanup_done = False

        atexit.register(self._cleanup_on_exit)

        ColorPrinter.info(f"Connected to {redpitaya.address}")
        ColorPrinter.info("Setting instrument to safe state")
        self.redpitaya.safe_state()

    def _cleanup_on_exit(self):
        """Called on normal exit and by 'quit'."""
        if self._cleanup_done:
            return
        self._cleanup_done = True
        try:
            if self.redpitaya.transport.is_connected:
                self.session.quit()
        except TransportError as exc:
            ColorPrinter.error(f"Error during cleanup: {exc}")
        finally:
            self.redpitaya.disconnect()

    # --------------------------
    # Core helpers
    # --------------------------
    def _parse_args(self, arg):
        try:
            return shlex.split(arg)
        except ValueError as exc:
            ColorPrinter.error(f"Parse error: {exc}")
            return []

    def _is_help(self, args):
        if not args:
            return False
        return args[-1].lower() in ("help", "-h", "--help")

    def _strip_help(self, args):
        if self._is_help(args):
            return args[:-1], True
        return args, False

    def _print_colored_usage(self, lines):
        """Print colorful usage help for a command."""
        for line in lines:
            if line.strip().startswith("#"):
                ColorPrinter.header(line.strip("# ").strip())
            elif line.strip().startswith("-"):
                print(f"{ColorPrinter.YELLOW}{line}{ColorPrinter.RESET}")
            elif "<" in line and ">" in line:
                parts = line.split(" ", 1)
                if len(parts) == 2:
                    print(f"{ColorPrinter.CYAN}{parts[0]}{ColorPrinter.RESET} {parts[1]}")
                else:
                    print(f"{ColorPrinter.CYAN}{line}{ColorPrinter.RESET}")
            elif line.strip():
                print(f"{ColorPrinter.CYAN}{line}{ColorPrinter.RESET}")
            else:
                print(line)

    def _parse_on_off(self, text):
        text = text.lower()
        if text not in ("on", "off"):
            raise ValueError(f"Invalid state '{text}'. Must be one of: ['on', 'off']")
        return text == "on"

    def emptyline(self):
        pass

    # --------------------------
    # Acquisition
    # --------------------------
    def do_acq(self, arg):
        "acq <cmd>: control acquisition (start, stop, rate, avg, gain, probe, ...)"
        args = self._parse_args(arg)
        args, help_flag = self._strip_help(args)

        if not args or help_flag:
            self._print_colored_usage(
                [
                    "# ACQUISITION COMMANDS",
                    "",
                    "acq start|stop|reset",
                    "acq rate <decimation>",
                    "  - decimation: 1|8|64|1024|8192|65536",
                    "acq avg on|off",
                    "acq gain <1|2> lv|hv",
                    "acq probe <1|2> <1|10|100>",
                    "acq units volts|raw",
                    "acq status",
                ]
            )
            return

        acquire = self.session.acquire
        cmd_name = args[0].lower()

        try:
            if cmd_name == "start":
                acquire.start()
                ColorPrinter.success("Acquisition started")
            elif cmd_name == "stop":
                acquire.stop()
                ColorPrinter.success("Acquisition stopped")
            elif cmd_name == "reset":
                acquire.reset()
                ColorPrinter.success("Acquisition reset")
            elif cmd_name == "rate" and len(args) >= 2:
                self.session.set_rate(int(args[1]))
                ColorPrinter.success(self.session.status())
            elif cmd_name == "avg" and len(args) >= 2:
                if self._parse_on_off(args[1]):
                    acquire.enable_average()
                else:
                    acquire.disable_average()
                ColorPrinter.success(f"Averaging {args[1].lower()}")
            elif cmd_name == "gain" and len(args) >= 3:
                acquire.set_gain(_channel_number(args[1]), args[2])
                ColorPrinter.success(f"IN{args[1][-1]} gain {args[2].upper()}")
            elif cmd_name == "probe" and len(args) >= 3:
                acquire.set_attenuation(_channel_number(args[1]), int(args[2]))
                ColorPrinter.success(f"IN{args[1][-1]} probe x{args[2]}")
            elif cmd_name == "units" and len(args) >= 2:
                acquire.set_units(args[1])
                ColorPrinter.success(f"Units {args[1].upper()}")
            elif cmd_name == "status":
                values = {
                    "started": acquire.is_started(),
                    "rate": acquire.get_decimation(),
                    "average": acquire.is_average_enabled(),
                    "buffer size": acquire.get_buffer_size(),
                }
                for source in InputSource:
                    values[f"{source} gain"] = acquire.get_gain(source)
                    values[f"{source} probe"] = f"x{acquire.get_attenuation(source)}"
                ColorPrinter.readings(values)
            else:
                ColorPrinter.warning(f"Unknown acq command '{arg}'. Type 'acq help'.")
        except ValueError as exc:
            ColorPrinter.error(str(exc))

    # --------------------------
    # Generator
    # --------------------------
    def do_gen(self, arg):
        "gen <cmd>: control the signal generator (on, off, wave, freq, amp, ...)"
        args = self._parse_args(arg)
        args, help_flag = self._strip_help(args)

        if not args or help_flag:
            self._print_colored_usage(
                [
                    "# GENERATOR COMMANDS",
                    "",
                    "gen on|off <1|2>",
                    "gen wave <1|2> <form> [freq=] [amp=] [offset=] [duty=]",
                    "  - form: sine|square|triangle|sawu|sawd|dc|pwm|arb",
                    "  - example: gen wave 1 sine freq=1000 amp=0.5",
                    "gen freq <1|2> <Hz>",
                    "gen amp <1|2> <V>",
                    "gen offset <1|2> <V>",
                    "gen duty <1|2> <0..1>",
                    "gen state <1|2>",
                ]
            )
            return

        generator = self.session.generator
        cmd_name = args[0].lower()

        try:
            if cmd_name in ("on", "off") and len(args) >= 2:
                source = OutputSource.parse(_channel_number(args[1]))
                if cmd_name == "on":
                    generator.start(source)
                else:
                    generator.stop(source)
                ColorPrinter.success(f"{source} {cmd_name}")
            elif cmd_name == "wave" and len(args) >= 3:
                source = OutputSource.parse(_channel_number(args[1]))
                form = GEN_FORM_ALIASES.get(args[2].lower(), args[2])
                generator.set_form(source, form)
                for item in args[3:]:
                    key, sep, value = item.partition("=")
                    if not sep or key.lower() not in GEN_WAVE_KEYS:
                        raise ValueError(
                            f"Invalid parameter '{item}'. "
                            f"Must be one of: {sorted(set(GEN_WAVE_KEYS))}"
                        )
                    setter = getattr(generator, f"set_{GEN_WAVE_KEYS[key.lower()]}")
                    setter(source, float(value))
                ColorPrinter.success(f"{source} {generator.state(source).form}")
            elif cmd_name in GEN_WAVE_KEYS and len(args) >= 3:
                source = OutputSource.parse(_channel_number(args[1]))
                setter = getattr(generator, f"set_{GEN_WAVE_KEYS[cmd_name]}")
                setter(source, float(args[2]))
                ColorPrinter.success(f"{source} {GEN_WAVE_KEYS[cmd_name]} {args[2]}")
            elif cmd_name == "state" and len(args) >= 2:
                source = OutputSource.parse(_channel_number(args[1]))
                state = generator.refresh(source)
                ColorPrinter.readings(
                    {
                        "output": "ON" if state.started else "OFF",
                        "form": state.form,
                        "amplitude": state.amplitude,
                        "offset": state.offset,
                        "frequency": state.frequency,
                        "duty cycle": state.duty_cycle,
                    }
                )
            else:
                ColorPrinter.warning(f"Unknown gen command '{arg}'. Type 'gen help'.")
        except ValueError as exc:
            ColorPrinter.error(str(exc))

    # --------------------------
    # Trigger
    # --------------------------
    def do_trig(self, arg):
        "trig <cmd>: control the trigger (channel, edge, level, delay, mode, ...)"
        args = self._parse_args(arg)
        args, help_flag = self._strip_help(args)

        if not args or help_flag:
            self._print_colored_usage(
                [
                    "# TRIGGER COMMANDS",
                    "",
                    "trig channel <ch1|ch2|ext>",
                    "trig edge <positive|negative>",
                    "  - the trigger is armed once both channel and edge are set",
                    "trig level <V>",
                    "trig delay <ticks>",
                    "trig mode auto|normal|single",
                    "trig single",
                    "trig now|off|state",
                ]
            )
            return

        session = self.session
        cmd_name = args[0].lower()

        try:
            if cmd_name == "channel" and len(args) >= 2:
                self._report_trigger(session.set_trigger_channel(args[1]))
            elif cmd_name == "edge" and len(args) >= 2:
                edge = {"pos": "Positive", "neg": "Negative"}.get(args[1].lower(), args[1])
                self._report_trigger(session.set_trigger_edge(edge))
            elif cmd_name == "level" and len(args) >= 2:
                session.trigger.set_level(float(args[1]))
                ColorPrinter.success(f"Trigger level {args[1]} V")
            elif cmd_name == "delay" and len(args) >= 2:
                session.trigger.set_delay_in_ns(int(args[1]))
                ColorPrinter.success(f"Trigger delay {args[1]}")
            elif cmd_name == "mode" and len(args) >= 2:
                session.set_mode(args[1])
                ColorPrinter.success(f"Mode {session.mode}")
            elif cmd_name == "single":
                session.single()
                ColorPrinter.success("Armed for one acquisition")
            elif cmd_name == "now":
                session.trigger.now()
                ColorPrinter.success("Triggered")
            elif cmd_name == "off":
                session.trigger.disable()
                ColorPrinter.success("Trigger disabled")
            elif cmd_name == "state":
                ColorPrinter.readings(
                    {
                        "mode": session.mode,
                        "channel": session.trigger_channel,
                        "edge": session.trigger_edge,
                        "state": session.trigger.get_state(),
                        "level": session.trigger.get_level(),
                        "delay": session.trigger.get_delay(),
                    }
                )
            else:
                ColorPrinter.warning(f"Unknown trig command '{arg}'. Type 'trig help'.")
        except ValueError as exc:
            ColorPrinter.error(str(exc))

    def _report_trigger(self, source):
        if source is None:
            ColorPrinter.info("Select both channel and edge to arm the trigger")
        else:
            ColorPrinter.success(f"Trigger armed on {source}")

    # --------------------------
    # Data and preview
    # --------------------------
    def do_fetch(self, arg):
        "fetch [all|oldest]: read the input buffers and summarise every trace"
        args = self._parse_args(arg)
        args, help_flag = self._strip_help(args)

        if help_flag:
            self._print_colored_usage(
                [
                    "# FETCH",
                    "",
                    "fetch",
                    "  - one tick in the current trigger mode",
                    "fetch all|oldest",
                    "  - read the whole buffer or the oldest samples now",
                ]
            )
            return

        if not args:
            if not self.session.acquire.is_started():
                ColorPrinter.warning("Acquisition is stopped. Run 'acq start' first")
                return
            data = self.session.tick()
            if data is None:
                ColorPrinter.warning("Single mode: run 'trig single' to arm a read")
                return
        elif args[0].lower() in ("all", "oldest"):
            self.session.fetch(oldest=args[0].lower() == "oldest")
        else:
            ColorPrinter.warning(f"Unknown fetch mode '{args[0]}'")
            return

        self._print_traces()

    def _print_traces(self):
        values = {}
        for trace in self.session.traces():
            if len(trace):
                values[trace.name] = (
                    f"{len(trace)} pts, "
                    f"min {np.min(trace.voltage):.3f} V, "
                    f"max {np.max(trace.voltage):.3f} V, "
                    f"offset {trace.offset:.3f} V"
                )
            else:
                values[trace.name] = "no samples"
        if values:
            ColorPrinter.readings(values)
        else:
            ColorPrinter.warning("Nothing to show")

    def do_preview(self, arg):
        "preview <1|2> [points]: synthesize the generator output as drawn"
        args = self._parse_args(arg)
        args, help_flag = self._strip_help(args)

        if not args or help_flag:
            self._print_colored_usage(
                [
                    "# PREVIEW",
                    "",
                    "preview <1|2> [points]",
                    "  - uses the last known generator settings, no device I/O",
                ]
            )
            return

        try:
            source = OutputSource.parse(_channel_number(args[0]))
            state = self.session.generator.state(source)
            if state.form is None:
                ColorPrinter.warning(f"{source} has no waveform yet. Try 'gen state {args[0]}'")
                return
            trace = self.session.graph.generator_trace(source, state)
            points = int(args[1]) if len(args) > 1 else 8
        except (ValueError, NotImplementedError) as exc:
            ColorPrinter.error(str(exc))
            return

        step = max(1, len(trace) // max(1, points))
        for t, v in zip(trace.time[::step], trace.voltage[::step]):
            print(f"  {t:12.3f} µs  {v:+.4f} V")

    # --------------------------
    # Display model
    # --------------------------
    def do_scales(self, arg):
        "scales: show the visible time and voltage ranges"
        scales = self.session.graph.scales
        ColorPrinter.cyan(self.session.status())
        ColorPrinter.readings(
            {
                "time (µs)": f"{scales.h[0]} .. {scales.h[1]}",
                "voltage (V)": f"{scales.v[0]} .. {scales.v[1]}",
                "samples": scales.n_samples,
                "window": f"{scales.window.width} x {scales.window.height} px",
            }
        )

    do_status = do_scales

    def do_resize(self, arg):
        "resize <width> <height>: set the drawing surface size in pixels"
        args = self._parse_args(arg)
        if len(args) != 2:
            ColorPrinter.warning("Use: resize <width> <height>")
            return
        try:
            self.session.resize(int(args[0]), int(args[1]))
        except ValueError as exc:
            ColorPrinter.error(str(exc))
            return
        ColorPrinter.success(f"Window {args[0]} x {args[1]} px")

    def do_level(self, arg):
        "level <name> <pixel>: place a level marker (IN1, OUT2, TRIG, DELAY, ...)"
        args = self._parse_args(arg)
        if len(args) != 2:
            ColorPrinter.warning("Use: level <name> <pixel>")
            return
        name = args[0].upper()
        try:
            self.session.set_level(name, int(args[1]))
            offset = self.session.graph.offset(name)
        except ValueError as exc:
            ColorPrinter.error(str(exc))
            return
        unit = "µs" if name == "DELAY" else "V"
        ColorPrinter.success(f"{name} at {offset:.3f} {unit}")

    # --------------------------
    # Misc
    # --------------------------
    def do_raw(self, arg):
        "raw <scpi>: send a raw command; queries ending in '?' print the reply"
        command = arg.strip()
        if not command:
            ColorPrinter.warning("Use: raw <scpi command>")
            return
        if command.split(" ", 1)[0].endswith("?"):
            print(self.redpitaya.transport.send_and_receive(command))
        else:
            self.redpitaya.transport.send(command)

    def do_exit(self, arg):
        "exit: quit the REPL"
        return self.do_quit(arg)

    def do_quit(self, arg):
        "quit: switch outputs off and quit the REPL"
        self._cleanup_on_exit()
        return True

    def do_EOF(self, arg):
        print()
        return self.do_quit(arg)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="yellow-pitaya", description="Interactive Red Pitaya console."
    )
    parser.add_argument("address", nargs="?", help="instrument address, host[:port]")
    parser.add_argument(
        "--mock", action="store_true", help="use the simulated instrument"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="trace commands (-v) and replies (-vv)",
    )
    parser.add_argument(
        "--timeout", type=int, default=None, help="reply timeout in milliseconds"
    )
    args = parser.parse_args(argv)

    if not args.address and not args.mock:
        parser.error("an address is required unless --mock is given")

    start_log(level_from_verbosity(args.verbose))

    try:
        if args.mock:
            from .mock_instruments import get_mock_redpitaya

            redpitaya = get_mock_redpitaya(args.address or "localhost")
        elif args.timeout is not None:
            redpitaya = Redpitaya(args.address, timeout=args.timeout)
        else:
            redpitaya = Redpitaya(args.address)
        redpitaya.connect()
        repl = PitayaRepl(redpitaya)
        repl.cmdloop()
    except (TransportError, ValueError) as exc:
        logger.debug("Fatal error: {!r}", exc)
        ColorPrinter.error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
