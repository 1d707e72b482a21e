"""
Command catalog — one coroutine per protocol verb

Every method builds its params with stringify() and goes through
Bulb.invoke(). They return the reply values (usually ["ok"]) or None when the
connection is in no_response mode.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from yeelink.connection.protocol import stringify
from yeelink.types import (
    AdjustAction,
    CfAction,
    CronType,
    Effect,
    FlowExpression,
    Mode,
    MusicAction,
    Power,
    Prop,
    Properties,
    Property,
    SceneClass,
)

Reply = Optional[List[str]]


class Commands(ABC):
    """Mixin providing the bulb verbs on top of invoke(method, *params)."""

    @abstractmethod
    async def invoke(self, method: str, *params, expect_reply: Optional[bool] = None) -> Reply:
        """Send method with already-stringified params and return the reply values."""

    async def _call(self, method: str, *args) -> Reply:
        return await self.invoke(method, *(stringify(a) for a in args))

    # -- properties --

    async def get_prop(self, properties: Union[Properties, List[Property]]) -> Reply:
        """Retrieve current properties; the reply follows the requested order."""
        if not isinstance(properties, Properties):
            properties = Properties(properties)
        return await self._call("get_prop", properties)

    # -- power --

    async def set_power(self, power: Power, effect: Effect, duration, mode: Mode = Mode.NORMAL) -> Reply:
        """
        Switch the light on or off.

        duration is the fade time (minimum 30 ms, ignored for Effect.SUDDEN);
        mode picks the mode to turn on in (Mode.NORMAL keeps the current one).
        """
        return await self._call("set_power", power, effect, duration, mode)

    async def bg_set_power(self, power: Power, effect: Effect, duration, mode: Mode = Mode.NORMAL) -> Reply:
        return await self._call("bg_set_power", power, effect, duration, mode)

    async def on(self) -> Reply:
        return await self.set_power(Power.ON, Effect.SUDDEN, 0, Mode.NORMAL)

    async def off(self) -> Reply:
        return await self.set_power(Power.OFF, Effect.SUDDEN, 0, Mode.NORMAL)

    async def bg_on(self) -> Reply:
        return await self.bg_set_power(Power.ON, Effect.SUDDEN, 0, Mode.NORMAL)

    async def bg_off(self) -> Reply:
        return await self.bg_set_power(Power.OFF, Effect.SUDDEN, 0, Mode.NORMAL)

    async def toggle(self) -> Reply:
        """Flip the main light power state."""
        return await self._call("toggle")

    async def bg_toggle(self) -> Reply:
        """Flip the background light power state."""
        return await self._call("bg_toggle")

    async def dev_toggle(self) -> Reply:
        """Flip both the main and the background light."""
        return await self._call("dev_toggle")

    # -- color --

    async def set_ct_abx(self, ct_value: int, effect: Effect, duration) -> Reply:
        """Set color temperature in kelvin."""
        return await self._call("set_ct_abx", ct_value, effect, duration)

    async def bg_set_ct_abx(self, ct_value: int, effect: Effect, duration) -> Reply:
        return await self._call("bg_set_ct_abx", ct_value, effect, duration)

    async def set_rgb(self, rgb_value: int, effect: Effect, duration) -> Reply:
        return await self._call("set_rgb", rgb_value, effect, duration)

    async def bg_set_rgb(self, rgb_value: int, effect: Effect, duration) -> Reply:
        return await self._call("bg_set_rgb", rgb_value, effect, duration)

    async def set_hsv(self, hue: int, sat: int, effect: Effect, duration) -> Reply:
        return await self._call("set_hsv", hue, sat, effect, duration)

    async def bg_set_hsv(self, hue: int, sat: int, effect: Effect, duration) -> Reply:
        return await self._call("bg_set_hsv", hue, sat, effect, duration)

    async def set_bright(self, brightness: int, effect: Effect, duration) -> Reply:
        return await self._call("set_bright", brightness, effect, duration)

    async def bg_set_bright(self, brightness: int, effect: Effect, duration) -> Reply:
        return await self._call("bg_set_bright", brightness, effect, duration)

    async def set_scene(self, scene: SceneClass, val1: int, val2: int, val3: int) -> Reply:
        return await self._call("set_scene", scene, val1, val2, val3)

    async def bg_set_scene(self, scene: SceneClass, val1: int, val2: int, val3: int) -> Reply:
        return await self._call("bg_set_scene", scene, val1, val2, val3)

    # -- color flow --

    async def start_cf(self, count: int, action: CfAction, flow_expression: FlowExpression) -> Reply:
        """Start a color flow; count 0 loops forever."""
        return await self._call("start_cf", count, action, flow_expression)

    async def bg_start_cf(self, count: int, action: CfAction, flow_expression: FlowExpression) -> Reply:
        return await self._call("bg_start_cf", count, action, flow_expression)

    async def stop_cf(self) -> Reply:
        return await self._call("stop_cf")

    async def bg_stop_cf(self) -> Reply:
        return await self._call("bg_stop_cf")

    # -- adjust --

    async def set_adjust(self, action: AdjustAction, prop: Prop) -> Reply:
        """
        Change brightness, CT or color without knowing the current value.

        With Prop.COLOR only AdjustAction.CIRCLE is accepted by the bulb.
        """
        return await self._call("set_adjust", action, prop)

    async def bg_set_adjust(self, action: AdjustAction, prop: Prop) -> Reply:
        return await self._call("bg_set_adjust", action, prop)

    async def adjust_bright(self, percentage: int, duration) -> Reply:
        return await self._call("adjust_bright", percentage, duration)

    async def bg_adjust_bright(self, percentage: int, duration) -> Reply:
        return await self._call("bg_adjust_bright", percentage, duration)

    async def adjust_ct(self, percentage: int, duration) -> Reply:
        return await self._call("adjust_ct", percentage, duration)

    async def bg_adjust_ct(self, percentage: int, duration) -> Reply:
        return await self._call("bg_adjust_ct", percentage, duration)

    async def adjust_color(self, percentage: int, duration) -> Reply:
        return await self._call("adjust_color", percentage, duration)

    async def bg_adjust_color(self, percentage: int, duration) -> Reply:
        return await self._call("bg_adjust_color", percentage, duration)

    # -- misc --

    async def set_default(self) -> Reply:
        """Save the current state as power-on default (only accepted while on)."""
        return await self._call("set_default")

    async def bg_set_default(self) -> Reply:
        return await self._call("bg_set_default")

    async def set_name(self, name: str) -> Reply:
        """Store a device name, reported back in discovery responses."""
        return await self._call("set_name", name)

    async def set_music(self, action: MusicAction, host: str, port: int) -> Reply:
        """Ask the bulb to open (or drop) a music-mode connection to host:port."""
        return await self._call("set_music", action, host, port)

    async def cron_add(self, cron_type: CronType, value: int) -> Reply:
        """Start a sleep timer of value minutes."""
        return await self._call("cron_add", cron_type, value)

    async def cron_del(self, cron_type: CronType) -> Reply:
        return await self._call("cron_del", cron_type)

    async def cron_get(self, cron_type: CronType = CronType.OFF) -> Reply:
        # cron_get replies with an object; delayoff carries the same minutes
        return await self.get_prop(Properties([Property.DELAY_OFF]))
