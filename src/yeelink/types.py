"""
Wire vocabulary — enumerations and composite values understood by the bulb

Every enum member's value is exactly what goes on the wire: string-valued
members are sent quoted, integer-valued members bare (see
yeelink.connection.protocol.stringify).
"""

from datetime import timedelta
from enum import Enum
from typing import Iterable, List, Union


def _normalize(text: str) -> str:
    return text.replace("_", "").replace("-", "").lower()


class WireEnum(Enum):
    """Enum with case-insensitive parsing from member names or wire values."""

    @classmethod
    def parse(cls, text):
        wanted = _normalize(str(text))
        for member in cls:
            if wanted in (_normalize(member.name), _normalize(str(member.value))):
                return member
        valid = " ".join(cls.names())
        raise ValueError(f"Could not parse {text}\n Valid values: {valid}")

    @classmethod
    def names(cls) -> List[str]:
        return [member.name.lower().replace("_", "-") for member in cls]


class Property(WireEnum):
    POWER = "power"
    BRIGHT = "bright"
    CT = "ct"
    RGB = "rgb"
    HUE = "hue"
    SAT = "sat"
    COLOR_MODE = "color_mode"
    FLOWING = "flowing"
    DELAY_OFF = "delayoff"
    FLOW_PARAMS = "flow_params"
    MUSIC_ON = "music_on"
    NAME = "name"
    BG_POWER = "bg_power"
    BG_FLOWING = "bg_flowing"
    BG_FLOW_PARAMS = "bg_flow_params"
    BG_CT = "bg_ct"
    BG_COLOR_MODE = "bg_lmode"
    BG_BRIGHT = "bg_bright"
    BG_RGB = "bg_rgb"
    BG_HUE = "bg_hue"
    BG_SAT = "bg_sat"
    NIGHT_LIGHT_BRIGHT = "nl_br"
    ACTIVE_MODE = "active_mode"


class Power(WireEnum):
    """Bulb power state."""
    ON = "on"
    OFF = "off"


class Effect(WireEnum):
    """How a change is applied.

    SUDDEN jumps straight to the target value and the duration parameter is
    ignored; SMOOTH fades over the given duration.
    """
    SUDDEN = "sudden"
    SMOOTH = "smooth"


class Prop(WireEnum):
    """Property targeted by the adjust commands."""
    BRIGHT = "bright"
    CT = "ct"
    COLOR = "color"


class SceneClass(WireEnum):
    COLOR = "color"
    HSV = "hsv"
    CT = "ct"
    CF = "cf"
    AUTO_DELAY_OFF = "auto_delay_off"


class Mode(WireEnum):
    """Mode the lamp switches into when powered on (NORMAL keeps the current one)."""
    NORMAL = 0
    CT = 1
    RGB = 2
    HSV = 3
    CF = 4
    NIGHT_LIGHT = 5


class CronType(WireEnum):
    OFF = 0


class CfAction(WireEnum):
    """What the lamp does once a color flow ends."""
    RECOVER = 0
    STAY = 1
    OFF = 2


class AdjustAction(WireEnum):
    INCREASE = "increase"
    DECREASE = "decrease"
    CIRCLE = "circle"


class MusicAction(WireEnum):
    OFF = 0
    ON = 1


class FlowMode(WireEnum):
    COLOR = 1
    CT = 2
    SLEEP = 7


def to_millis(duration: Union[int, timedelta]) -> int:
    """Durations are accepted as timedelta or integer milliseconds."""
    if isinstance(duration, timedelta):
        return int(duration.total_seconds() * 1000)
    return int(duration)


class FlowTuple:
    """One state change of a color flow: color, color temperature or sleep.

    Args:
        duration: length of the change (timedelta or milliseconds)
        mode: FlowMode.COLOR, FlowMode.CT or FlowMode.SLEEP
        value: RGB color for COLOR, kelvin for CT, ignored by SLEEP
        brightness: percentage 1-100, or -1 to keep the previous value
    """

    __slots__ = ("duration", "mode", "value", "brightness")

    def __init__(self, duration, mode: FlowMode, value: int, brightness: int):
        self.duration = to_millis(duration)
        self.mode = mode
        self.value = value
        self.brightness = brightness

    @classmethod
    def rgb(cls, duration, rgb: int, brightness: int) -> "FlowTuple":
        return cls(duration, FlowMode.COLOR, rgb, brightness)

    @classmethod
    def ct(cls, duration, ct: int, brightness: int) -> "FlowTuple":
        return cls(duration, FlowMode.CT, ct, brightness)

    @classmethod
    def sleep(cls, duration) -> "FlowTuple":
        return cls(duration, FlowMode.SLEEP, 0, -1)

    def __str__(self):
        return f"{self.duration},{self.mode.value},{self.value},{self.brightness}"

    def __repr__(self):
        return f"FlowTuple({self})"

    def __eq__(self, other):
        if not isinstance(other, FlowTuple):
            return NotImplemented
        return str(self) == str(other)


class FlowExpression:
    """Series of FlowTuples sent as one composite parameter of start_cf."""

    def __init__(self, tuples: Iterable[FlowTuple] = ()):
        self.tuples = list(tuples)

    def __len__(self):
        return len(self.tuples)

    def __iter__(self):
        return iter(self.tuples)

    def __str__(self):
        return ",".join(str(t) for t in self.tuples)

    def __repr__(self):
        return f"FlowExpression({self})"

    def __eq__(self, other):
        if not isinstance(other, FlowExpression):
            return NotImplemented
        return self.tuples == other.tuples

    @classmethod
    def parse(cls, text: str) -> "FlowExpression":
        """Parse ``duration,mode,value,brightness[,...]``.

        The mode may be a FlowMode name or its numeric code (1, 2, 7).
        """
        fields = [f.strip() for f in text.split(",") if f.strip()]
        if len(fields) % 4:
            raise ValueError("Flow expression needs groups of duration,mode,value,brightness")
        tuples = []
        for i in range(0, len(fields), 4):
            duration, mode, value, brightness = fields[i:i + 4]
            if mode.isdigit():
                try:
                    flow_mode = FlowMode(int(mode))
                except ValueError:
                    raise ValueError(
                        f"Could not parse FlowMode: {mode}\n"
                        "valid values: 1 (Color), 2 (CT), 7 (Sleep)"
                    ) from None
            else:
                flow_mode = FlowMode.parse(mode)
            tuples.append(FlowTuple(int(duration), flow_mode, int(value), int(brightness)))
        return cls(tuples)


class Properties:
    """List of Property requested by get_prop; the reply keeps the same order."""

    def __init__(self, properties: Iterable[Union[Property, str]]):
        self.properties = [
            p if isinstance(p, Property) else Property.parse(p) for p in properties
        ]

    def __len__(self):
        return len(self.properties)

    def __iter__(self):
        return iter(self.properties)
