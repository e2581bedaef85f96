# voltas.py
"""Voltas Climate IR Protocol."""
import logging
import math
from dataclasses import dataclass
from enum import Enum

from .base import ClimateIRProtocol

_LOGGER = logging.getLogger(__name__)

SIGNAL_LENGTH = 10

TEMP_MIN = 16
TEMP_MAX = 30
DEFAULT_TEMPERATURE = 24

# Byte 0 of every frame
PREAMBLE = 0x33
# Bytes 4-8 of every ON frame
ON_FOOTER = (0x3B, 0x3B, 0x3B, 0x11, 0x20)

OFF_SIGNAL = bytes([0x33, 0x28, 0x08, 0x18, 0x3B, 0x3B, 0x3B, 0x11, 0x20, 0xA2])


class Power(str, Enum):
    ON = "ON"
    OFF = "OFF"


class Mode(str, Enum):
    COOL = "COOL"
    HEAT = "HEAT"
    DRY = "DRY"
    FAN = "FAN"
    UNKNOWN = "UNKNOWN"


class FanSpeed(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    AUTO = "AUTO"
    DEFAULT = "DEFAULT"


# (byte1, byte2, byte9 base); byte3 is the temperature, byte9 = base - temp
COOL_FAN_ROWS = {
    FanSpeed.LOW: (0x88, 0x80, 0xE2),
    FanSpeed.MEDIUM: (0x48, 0x80, 0x22),
    FanSpeed.HIGH: (0x28, 0x80, 0x42),
    FanSpeed.AUTO: (0xE8, 0x80, 0x82),
}
COOL_DEFAULT_ROW = (0x28, 0x88, 0x3A)
HEAT_ROW = (0x22, 0x88, 0x40)

# (byte1, byte2, byte3, byte9); temperature and fan are not encoded
FIXED_ROWS = {
    Mode.DRY: (0x84, 0x88, 0x18, 0xC6),
    Mode.FAN: (0x41, 0x88, 0x10, 0x11),
}


def _lookup(enum_cls, value, default):
    """Case-insensitive lookup of a free-form value, falling back to default."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return default
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return default


def parse_power(value):
    """Anything that is not "ON" is OFF."""
    return _lookup(Power, value, Power.OFF)


def parse_mode(value):
    return _lookup(Mode, value, Mode.UNKNOWN)


def parse_fan_speed(value):
    """Map LOW/MEDIUM/HIGH/AUTO, everything else (e.g. "NONE") is DEFAULT."""
    return _lookup(FanSpeed, value, FanSpeed.DEFAULT)


def parse_temperature(value, default=DEFAULT_TEMPERATURE):
    """Coerce a temperature to int without clamping; unusable values give default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return default
    return default


def clamp_temperature(temp):
    return max(TEMP_MIN, min(TEMP_MAX, temp))


@dataclass(frozen=True)
class AcCommandRequest:
    """One requested AC state."""

    power: Power = Power.OFF
    mode: Mode = Mode.UNKNOWN
    target_temp: int = DEFAULT_TEMPERATURE
    fan_speed: FanSpeed = FanSpeed.DEFAULT

    @classmethod
    def from_values(cls, power=None, mode=None, temp=None, fan=None, temp_default=DEFAULT_TEMPERATURE):
        """Build a request from loosely typed input such as a JSON message."""
        return cls(
            power=parse_power(power),
            mode=parse_mode(mode),
            target_temp=parse_temperature(temp, temp_default),
            fan_speed=parse_fan_speed(fan),
        )


def encode_signal(request):
    """
    Encode a request into the 10 byte Voltas frame.

    Never raises: power other than ON yields the fixed OFF frame, an unknown
    mode uses the COOL row with default fan and the temperature is clamped
    to 16-30.
    """
    if request.power is not Power.ON:
        return OFF_SIGNAL

    mode = request.mode
    if mode in FIXED_ROWS:
        byte1, byte2, byte3, byte9 = FIXED_ROWS[mode]
        return bytes([PREAMBLE, byte1, byte2, byte3, *ON_FOOTER, byte9])

    temp = clamp_temperature(parse_temperature(request.target_temp))
    if mode is Mode.HEAT:
        byte1, byte2, base = HEAT_ROW
    elif mode is Mode.COOL:
        byte1, byte2, base = COOL_FAN_ROWS.get(request.fan_speed, COOL_DEFAULT_ROW)
    else:
        byte1, byte2, base = COOL_DEFAULT_ROW

    return bytes([PREAMBLE, byte1, byte2, temp, *ON_FOOTER, (base - temp) & 0xFF])


def format_signal(signal):
    """Render a frame as {0x33, 0x28, ..., 0xA2}."""
    return "{" + ", ".join(f"0x{b:02X}" for b in signal) + "}"


class VoltasProtocol(ClimateIRProtocol):
    """
    Voltas Klima IR Protokolü
    10 byte frame, IRremoteESP8266 ir_Voltas zamanlamaları ile gönderilir
    """

    TEMP_MIN = TEMP_MIN
    TEMP_MAX = TEMP_MAX
    TEMP_STEP = 1

    # IR timing parameters (microseconds), no header
    BIT_MARK = 1026
    ONE_SPACE = 2553
    ZERO_SPACE = 554
    FREQUENCY = 38000

    HVAC_MODE_MAP = {
        "cool": Mode.COOL,
        "heat": Mode.HEAT,
        "dry": Mode.DRY,
        "fan_only": Mode.FAN,
    }

    def __init__(self):
        super().__init__()

        # No swing control on the Voltas remote
        self.supported_hvac_modes = ["off", "cool", "heat", "dry", "fan_only"]
        self.supported_fan_modes = ["default", "low", "medium", "high", "auto"]
        self.supported_swing_modes = ["off"]

        _LOGGER.debug("Voltas Protocol initialized")

    def build_request(self, hvac_mode, target_temp, fan_mode):
        """Translate Home Assistant climate values into a command request."""
        if hvac_mode == "off":
            return AcCommandRequest(power=Power.OFF)
        return AcCommandRequest(
            power=Power.ON,
            mode=self.HVAC_MODE_MAP.get(hvac_mode, Mode.UNKNOWN),
            target_temp=parse_temperature(target_temp),
            fan_speed=parse_fan_speed(fan_mode),
        )

    def generate_signal(self, request):
        signal = encode_signal(request)
        _LOGGER.debug("Generated Voltas signal for %s: %s", request, format_signal(signal))
        return signal

    def generate_ir_code(self, hvac_mode, target_temp, fan_mode, swing_mode):
        """Generate Voltas IR code for climate command."""
        _LOGGER.debug("Generating Voltas IR code: mode=%s, temp=%s, fan=%s, swing=%s",
                      hvac_mode, target_temp, fan_mode, swing_mode)

        request = self.build_request(hvac_mode, target_temp, fan_mode)
        if request.mode is Mode.UNKNOWN and request.power is Power.ON:
            _LOGGER.warning("Unknown mode '%s', defaulting to COOL with default fan", hvac_mode)

        return self.encode_pulses(self.generate_signal(request))

    def encode_pulses(self, signal):
        """Convert a frame to a mark/space pulse sequence (MSB first)."""
        pulses = []

        for byte in signal:
            for bit in range(7, -1, -1):
                pulses.append(self.BIT_MARK)
                if byte & (1 << bit):
                    pulses.append(self.ONE_SPACE)
                else:
                    pulses.append(self.ZERO_SPACE)

        # Footer
        pulses.append(self.BIT_MARK)

        return pulses
