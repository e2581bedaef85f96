"""
Interactive Voltas signal generator.

Prints the 10 byte frame for a chosen AC state so it can be compared against
captured reference codes. Usable without Home Assistant running::

    $ python -m custom_components.voltas_ir_climate.console
    $ python -m custom_components.voltas_ir_climate.console --power on --mode cool --temp 24 --fan low
"""
import argparse
import logging
import sys

from .climate_protocols.voltas import (
    DEFAULT_TEMPERATURE,
    AcCommandRequest,
    FanSpeed,
    Mode,
    Power,
    VoltasProtocol,
    encode_signal,
    format_signal,
    parse_temperature,
)

_LOGGER = logging.getLogger(__name__)

MODE_CHOICES = {1: Mode.COOL, 2: Mode.DRY, 3: Mode.HEAT, 4: Mode.FAN}
FAN_CHOICES = {0: FanSpeed.DEFAULT, 1: FanSpeed.LOW, 2: FanSpeed.MEDIUM, 3: FanSpeed.HIGH, 4: FanSpeed.AUTO}

MODE_MENU = """
Enter MODE:
  1: Cold
  2: Water (Dry)
  3: Sun (Heat)
  4: Fan
Choice (1-4, default 1 for Cold): """

FAN_MENU = """Enter FAN SPEED for Cold mode:
  0: Default (uses mode's standard fan setting)
  1: Low
  2: Medium
  3: High
  4: Auto
Choice (0-4, default 0): """


def _ask_int(prompt, input_fn):
    try:
        return int(input_fn(prompt).strip())
    except (ValueError, EOFError):
        return None


def prompt_request(input_fn=input, output=sys.stdout):
    """Ask for power, mode, temperature and fan speed like the handheld tool."""
    power = _ask_int("Enter POWER status (0 for OFF, 1 for ON): ", input_fn)
    if power != 1:
        if power != 0:
            print("Invalid POWER input. Assuming OFF (0).", file=output)
        return AcCommandRequest(power=Power.OFF)

    mode = MODE_CHOICES.get(_ask_int(MODE_MENU, input_fn))
    if mode is None:
        print("Invalid MODE input. Assuming COLD mode (1).", file=output)
        mode = Mode.COOL

    temp = DEFAULT_TEMPERATURE
    if mode in (Mode.COOL, Mode.HEAT):
        answer = _ask_int(f"Enter TEMPERATURE (16-30 C, default {DEFAULT_TEMPERATURE} C): ", input_fn)
        if answer is None:
            print(f"Invalid TEMP input. Using default {DEFAULT_TEMPERATURE} C.", file=output)
        else:
            temp = answer

    fan = FanSpeed.DEFAULT
    if mode is Mode.COOL:
        fan = FAN_CHOICES.get(_ask_int(FAN_MENU, input_fn))
        if fan is None:
            print("Invalid FAN SPEED input. Assuming Default fan (0).", file=output)
            fan = FanSpeed.DEFAULT

    return AcCommandRequest(power=Power.ON, mode=mode, target_temp=temp, fan_speed=fan)


def build_parser():
    parser = argparse.ArgumentParser(description="Generate Voltas AC IR signal codes")
    parser.add_argument("--power", help="ON or OFF; prompts interactively when omitted")
    parser.add_argument("--mode", default="COOL", help="COOL, HEAT, DRY or FAN")
    parser.add_argument("--temp", default=str(DEFAULT_TEMPERATURE), help="target temperature in C (16-30)")
    parser.add_argument("--fan", default="DEFAULT", help="LOW, MEDIUM, HIGH, AUTO or DEFAULT")
    parser.add_argument("--pulses", action="store_true", help="also print the IR mark/space timings")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def main(argv=None, input_fn=input, output=sys.stdout):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    if args.power is None:
        print("--- AC Control Signal Generator ---", file=output)
        request = prompt_request(input_fn, output)
    else:
        request = AcCommandRequest.from_values(args.power, args.mode, parse_temperature(args.temp), args.fan)
    _LOGGER.debug("Request: %s", request)

    signal = encode_signal(request)
    print("\nGenerated Signal Code:", file=output)
    print(f"signal[{len(signal)}] = {format_signal(signal)}", file=output)

    if args.pulses:
        pulses = VoltasProtocol().encode_pulses(signal)
        print(",".join(map(str, pulses)), file=output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
