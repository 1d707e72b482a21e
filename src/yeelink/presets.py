"""
Presets — named scenes and color flows
"""

from enum import Enum
from typing import NamedTuple, Union

from yeelink.commands import Commands, Reply
from yeelink.types import CfAction, FlowExpression, FlowTuple, SceneClass

RED = 0xFF_00_00
GREEN = 0x00_FF_00
BLUE = 0x00_00_FF


class Scene(NamedTuple):
    scene: SceneClass
    val1: int
    val2: int
    val3: int


class Flow(NamedTuple):
    expression: FlowExpression
    count: int
    action: CfAction


PresetValue = Union[Scene, Flow]


def rgb(color: int, bright: int) -> Scene:
    return Scene(SceneClass.COLOR, color, bright, 0)


def hsv(hue: int, sat: int, bright: int) -> Scene:
    return Scene(SceneClass.HSV, hue, sat, bright)


def ct(kelvin: int, bright: int) -> Scene:
    return Scene(SceneClass.CT, kelvin, bright, 0)


def disco(bpm: int) -> Flow:
    duration = 1000 // bpm
    colors = [0xFF_00_00, 0x80_FF_00, 0x00_FF_FF, 0x80_00_FF]
    tuples = []
    for color in colors:
        tuples.append(FlowTuple.rgb(duration, color, 100))
        tuples.append(FlowTuple.rgb(duration, color, 1))
    return Flow(FlowExpression(tuples), 0, CfAction.STAY)


def temp(a: int, b: int, brightness: int) -> Flow:
    duration = 40_000
    expr = FlowExpression([
        FlowTuple.ct(duration, a, brightness),
        FlowTuple.ct(duration, b, brightness),
    ])
    return Flow(expr, 0, CfAction.STAY)


def pulse(color: int, brightness: int, duration: int) -> Flow:
    expr = FlowExpression([
        FlowTuple.rgb(duration, color, brightness),
        FlowTuple.rgb(duration, color, 1),
    ])
    return Flow(expr, 2, CfAction.RECOVER)


def police(brightness: int) -> Flow:
    expr = FlowExpression([
        FlowTuple.rgb(300, RED, brightness),
        FlowTuple.rgb(300, BLUE, brightness),
    ])
    return Flow(expr, 0, CfAction.STAY)


def police2(brightness: int) -> Flow:
    tuples = []
    for color in (RED, BLUE):
        tuples += [
            FlowTuple.rgb(300, color, brightness),
            FlowTuple.rgb(300, color, 1),
            FlowTuple.rgb(300, color, brightness),
            FlowTuple.sleep(300),
        ]
    return Flow(FlowExpression(tuples), 0, CfAction.STAY)


def candle() -> Flow:
    steps = [(800, 50), (800, 30), (1200, 80), (800, 60), (1200, 90),
             (2400, 50), (1200, 80), (800, 60), (400, 70)]
    expr = FlowExpression(FlowTuple.ct(duration, 2700, bright) for duration, bright in steps)
    return Flow(expr, 0, CfAction.STAY)


def romantic() -> Flow:
    expr = FlowExpression([
        FlowTuple.rgb(4000, 0x59_15_6D, 1),
        FlowTuple.rgb(4000, 0x66_14_2A, 1),
    ])
    return Flow(expr, 0, CfAction.STAY)


def birthday() -> Flow:
    expr = FlowExpression([
        FlowTuple.rgb(1996, 0xDC_50_19, 80),
        FlowTuple.rgb(1996, 0xDC_78_1E, 80),
        FlowTuple.rgb(1996, 0xAA_32_14, 80),
    ])
    return Flow(expr, 0, CfAction.STAY)


def blink(duration: int, times: int) -> Flow:
    tuples = []
    for _ in range(times):
        tuples.append(FlowTuple.ct(duration, 5000, 100))
        tuples.append(FlowTuple.ct(duration, 5000, 1))
    # count is in state changes: play the expression once, then restore
    return Flow(FlowExpression(tuples), len(tuples), CfAction.RECOVER)


class Preset(Enum):
    CANDLE = "candle"
    READING = "reading"
    NIGHT_READING = "night-reading"
    COSY_HOME = "cosy-home"
    ROMANTIC = "romantic"
    BIRTHDAY = "birthday"
    DATE_NIGHT = "date-night"
    TEATIME = "teatime"
    PC_MODE = "pc-mode"
    CONCENTRATION = "concentration"
    MOVIE = "movie"
    NIGHT = "night"
    NOTIFY = "notify"
    NOTIFY2 = "notify2"
    PULSE_RED = "pulse-red"
    PULSE_BLUE = "pulse-blue"
    PULSE_GREEN = "pulse-green"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    POLICE = "police"
    POLICE2 = "police2"
    DISCO = "disco"
    TEMP = "temp"


_TABLE = {
    Preset.CANDLE: candle,
    Preset.READING: lambda: ct(3500, 100),
    Preset.NIGHT_READING: lambda: ct(4000, 40),
    Preset.COSY_HOME: lambda: ct(2700, 80),
    Preset.ROMANTIC: romantic,
    Preset.BIRTHDAY: birthday,
    Preset.DATE_NIGHT: lambda: hsv(24, 100, 50),
    Preset.TEATIME: lambda: ct(3000, 50),
    Preset.PC_MODE: lambda: ct(2700, 30),
    Preset.CONCENTRATION: lambda: ct(5000, 100),
    Preset.MOVIE: lambda: hsv(240, 60, 50),
    Preset.NIGHT: lambda: hsv(36, 100, 1),
    Preset.NOTIFY: lambda: blink(300, 3),
    Preset.NOTIFY2: lambda: blink(200, 2),
    Preset.PULSE_RED: lambda: pulse(RED, 100, 250),
    Preset.PULSE_BLUE: lambda: pulse(BLUE, 100, 250),
    Preset.PULSE_GREEN: lambda: pulse(GREEN, 100, 250),
    Preset.RED: lambda: rgb(RED, 100),
    Preset.GREEN: lambda: rgb(GREEN, 100),
    Preset.BLUE: lambda: rgb(BLUE, 100),
    Preset.POLICE: lambda: police(100),
    Preset.POLICE2: lambda: police2(100),
    Preset.DISCO: lambda: disco(120),
    Preset.TEMP: lambda: temp(2600, 5000, 100),
}


def preset_value(preset: Preset) -> PresetValue:
    return _TABLE[preset]()


async def apply(bulb: Commands, preset: Preset) -> Reply:
    """Send preset to bulb as one set_scene or start_cf command."""
    value = preset_value(preset)
    if isinstance(value, Flow):
        return await bulb.start_cf(value.count, value.action, value.expression)
    return await bulb.set_scene(value.scene, value.val1, value.val2, value.val3)
