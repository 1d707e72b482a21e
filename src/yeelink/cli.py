"""
yeelink CLI — control Yeelight smart lights from the shell

Commands:
    yeelink -a ADDRESS toggle          Flip the light
    yeelink -a ADDRESS set rgb 0xff0000
    yeelink -a ADDRESS listen          Print notifications
    yeelink discover                   List bulbs on the network
    yeelink init                       Create ~/.yeelink/config.env

ADDRESS is an IP address, a bulb name (found by discovery) or "all".
"""

import asyncio
import ipaddress

import click

from yeelink import __version__
from yeelink.config import Config
from yeelink.connection.bulb import Bulb
from yeelink.connection.errors import BulbError
from yeelink.connection.logger import set_level
from yeelink.discovery import discover as discover_bulbs
from yeelink.presets import Preset, apply as apply_preset
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


def _choice(enum_cls):
    return click.Choice(enum_cls.names(), case_sensitive=False)


def _auto_int(ctx, param, value):
    """Accept decimal or 0x-prefixed hex."""
    if value is None or isinstance(value, int):
        return value
    try:
        return int(value, 0)
    except ValueError:
        raise click.BadParameter(f"{value} is not a valid integer")


effect_option = click.option(
    "-e", "--effect", type=_choice(Effect), default="smooth", show_default=True,
)
duration_option = click.option(
    "-d", "--duration", type=int, default=500, show_default=True, help="Milliseconds.",
)
bg_option = click.option("--bg", is_flag=True, help="Perform action on background light")


@click.group()
@click.version_option(version=__version__, prog_name="yeelink")
@click.option("-a", "--address", envvar="YEELINK_ADDR", help="Bulb IP, bulb name or 'all'.")
@click.option("-p", "--port", type=int, default=Config.DEFAULT_PORT, envvar="YEELINK_PORT", show_default=True)
@click.option("-t", "--timeout", type=int, default=Config.TIMEOUT_MS, envvar="YEELINK_TIMEOUT",
              show_default=True, help="Connect/discovery timeout in milliseconds.")
@click.option("-v", "--verbose", is_flag=True, help="Echo debug logs to stderr.")
@click.pass_context
def main(ctx, address, port, timeout, verbose):
    """A CLI to control your Yeelight smart lights."""
    if verbose:
        set_level("DEBUG", echo=True)
    ctx.ensure_object(dict)
    ctx.obj.update(address=address, port=port, timeout=timeout)


# -- plumbing --

def _echo_reply(reply):
    if reply:
        for value in reply:
            if value != "ok":
                click.echo(value)


def _echo_found(found):
    click.echo(f"{found.location}\t{found.name or '-'}")


def _run(ctx, action):
    """Resolve the target bulb(s) from the global options and run action on each."""
    try:
        asyncio.run(_dispatch(ctx.obj, action))
    except asyncio.TimeoutError:
        raise click.ClickException("Timed out")
    except BulbError as exc:
        raise click.ClickException(str(exc))


async def _dispatch(settings, action):
    address = settings.get("address")
    timeout = settings["timeout"] / 1000 or None

    if not address:
        raise click.UsageError("No address specified (use --help for more info)")

    if address.lower() == "all":
        click.echo("Discovering bulbs...")
        async for found in discover_bulbs(timeout):
            _echo_found(found)
            async with await found.connect() as bulb:
                _echo_reply(await action(bulb))
        return

    if _is_ip(address):
        bulb = await asyncio.wait_for(Bulb.connect(address, settings["port"]), timeout)
    else:
        click.echo("Discovering bulbs...")
        bulb = None
        async for found in discover_bulbs(timeout):
            _echo_found(found)
            if found.name == address:
                bulb = await found.connect()
                break
        if bulb is None:
            raise click.ClickException("Bulb not found")

    async with bulb:
        _echo_reply(await action(bulb))


def _is_ip(address: str) -> bool:
    try:
        ipaddress.ip_address(address)
    except ValueError:
        return False
    return True


# -- commands --

@main.command()
def init():
    """Create the data dir (~/.yeelink/ by default) and a commented config.env."""
    Config.ensure_dirs()

    config_env = Config.DATA_DIR / "config.env"
    if not config_env.exists():
        config_env.write_text(
            "# yeelink Configuration\n"
            "# Uncomment and edit as needed.\n"
            "\n"
            "# YEELINK_ADDR=192.168.1.204\n"
            "# YEELINK_PORT=55443\n"
            "# YEELINK_TIMEOUT=5000\n"
            "# YEELINK_LOG_LEVEL=INFO\n"
        )

    click.echo(f"yeelink initialized at {Config.DATA_DIR}")
    click.echo(f"  Config: {config_env}")
    click.echo(f"  Logs:   {Config.LOG_DIR}")


@main.command()
@click.option("--duration", type=int, default=5000, show_default=True,
              help="Search time in milliseconds (0 searches forever).")
def discover(duration):
    """List bulbs answering on the local network."""
    async def _search():
        async for found in discover_bulbs(duration / 1000 or None):
            _echo_found(found)

    try:
        asyncio.run(_search())
    except KeyboardInterrupt:
        pass


@main.command()
@click.argument("properties", nargs=-1, required=True, type=_choice(Property))
@click.pass_context
def get(ctx, properties):
    """Get properties."""
    props = Properties(Property.parse(p) for p in properties)
    _run(ctx, lambda bulb: bulb.get_prop(props))


@main.command()
@click.option("--dev", is_flag=True, help="Perform action on all lights of device")
@bg_option
@click.pass_context
def toggle(ctx, dev, bg):
    """Toggle light."""
    if dev and bg:
        raise click.UsageError("--dev and --bg are mutually exclusive")

    async def action(bulb):
        if bg:
            return await bulb.bg_toggle()
        if dev:
            return await bulb.dev_toggle()
        return await bulb.toggle()

    _run(ctx, action)


def _power_command(name, power):
    @main.command(name, help=f"Turn {power.value} light.")
    @effect_option
    @duration_option
    @click.option("-m", "--mode", type=_choice(Mode), default="normal", show_default=True)
    @bg_option
    @click.pass_context
    def command(ctx, effect, duration, mode, bg):
        args = (power, Effect.parse(effect), duration, Mode.parse(mode))
        _run(ctx, lambda bulb: (bulb.bg_set_power if bg else bulb.set_power)(*args))

    return command


on = _power_command("on", Power.ON)
off = _power_command("off", Power.OFF)


@main.group("set")
@effect_option
@duration_option
@click.pass_context
def set_(ctx, effect, duration):
    """Set values."""
    ctx.obj.update(effect=Effect.parse(effect), duration=duration)


@set_.command("power")
@click.argument("power", type=_choice(Power))
@click.argument("mode", type=_choice(Mode), default="normal")
@bg_option
@click.pass_context
def set_power(ctx, power, mode, bg):
    """Set power state."""
    args = (Power.parse(power), ctx.obj["effect"], ctx.obj["duration"], Mode.parse(mode))
    _run(ctx, lambda bulb: (bulb.bg_set_power if bg else bulb.set_power)(*args))


@set_.command("ct")
@click.argument("color_temperature", type=int)
@bg_option
@click.pass_context
def set_ct(ctx, color_temperature, bg):
    """Set color temperature (kelvin)."""
    args = (color_temperature, ctx.obj["effect"], ctx.obj["duration"])
    _run(ctx, lambda bulb: (bulb.bg_set_ct_abx if bg else bulb.set_ct_abx)(*args))


@set_.command("rgb")
@click.argument("rgb_value", callback=_auto_int)
@bg_option
@click.pass_context
def set_rgb(ctx, rgb_value, bg):
    """Set RGB color (decimal or 0xRRGGBB)."""
    args = (rgb_value, ctx.obj["effect"], ctx.obj["duration"])
    _run(ctx, lambda bulb: (bulb.bg_set_rgb if bg else bulb.set_rgb)(*args))


@set_.command("hsv")
@click.argument("hue", type=int)
@click.argument("sat", type=int, default=100)
@bg_option
@click.pass_context
def set_hsv(ctx, hue, sat, bg):
    """Set hue and saturation."""
    args = (hue, sat, ctx.obj["effect"], ctx.obj["duration"])
    _run(ctx, lambda bulb: (bulb.bg_set_hsv if bg else bulb.set_hsv)(*args))


@set_.command("bright")
@click.argument("brightness", type=int)
@bg_option
@click.pass_context
def set_bright(ctx, brightness, bg):
    """Set brightness percentage."""
    args = (brightness, ctx.obj["effect"], ctx.obj["duration"])
    _run(ctx, lambda bulb: (bulb.bg_set_bright if bg else bulb.set_bright)(*args))


@set_.command("name")
@click.argument("name")
@click.pass_context
def set_name(ctx, name):
    """Set the device name."""
    _run(ctx, lambda bulb: bulb.set_name(name))


@set_.command("scene")
@click.argument("scene", type=_choice(SceneClass))
@click.argument("val1", callback=_auto_int)
@click.argument("val2", type=int, default=100)
@click.argument("val3", type=int, default=100)
@bg_option
@click.pass_context
def set_scene(ctx, scene, val1, val2, val3, bg):
    """Set a scene directly."""
    args = (SceneClass.parse(scene), val1, val2, val3)
    _run(ctx, lambda bulb: (bulb.bg_set_scene if bg else bulb.set_scene)(*args))


@set_.command("default")
@bg_option
@click.pass_context
def set_default(ctx, bg):
    """Save current state as power-on default."""
    _run(ctx, lambda bulb: bulb.bg_set_default() if bg else bulb.set_default())


@main.command()
@click.argument("minutes", type=int)
@click.pass_context
def timer(ctx, minutes):
    """Start timer."""
    _run(ctx, lambda bulb: bulb.cron_add(CronType.OFF, minutes))


@main.command("timer-clear")
@click.pass_context
def timer_clear(ctx):
    """Clear current timer."""
    _run(ctx, lambda bulb: bulb.cron_del(CronType.OFF))


@main.command("timer-get")
@click.pass_context
def timer_get(ctx):
    """Get remaining minutes for timer."""
    _run(ctx, lambda bulb: bulb.cron_get(CronType.OFF))


@main.command()
@click.argument("expression")
@click.argument("count", type=int, default=0)
@click.argument("action", type=_choice(CfAction), default="recover")
@bg_option
@click.pass_context
def flow(ctx, expression, count, action, bg):
    """Start color flow (duration,mode,value,brightness,...)."""
    try:
        expr = FlowExpression.parse(expression)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="EXPRESSION")
    args = (count, CfAction.parse(action), expr)
    _run(ctx, lambda bulb: (bulb.bg_start_cf if bg else bulb.start_cf)(*args))


@main.command("flow-stop")
@bg_option
@click.pass_context
def flow_stop(ctx, bg):
    """Stop color flow."""
    _run(ctx, lambda bulb: bulb.bg_stop_cf() if bg else bulb.stop_cf())


@main.command()
@click.argument("prop", type=_choice(Prop))
@click.argument("action", type=_choice(AdjustAction))
@bg_option
@click.pass_context
def adjust(ctx, prop, action, bg):
    """Adjust properties (bright/ct/color) (increase/decrease/circle)."""
    args = (AdjustAction.parse(action), Prop.parse(prop))
    _run(ctx, lambda bulb: (bulb.bg_set_adjust if bg else bulb.set_adjust)(*args))


@main.command("adjust-percent", context_settings={"ignore_unknown_options": True})
@click.argument("prop", type=_choice(Prop))
@click.argument("percent", type=click.IntRange(-100, 100))
@click.argument("duration", type=int, default=500)
@bg_option
@click.pass_context
def adjust_percent(ctx, prop, percent, duration, bg):
    """Adjust properties (bright/ct/color) by percentage (-100~100)."""
    prop = Prop.parse(prop)

    async def action(bulb):
        if prop is Prop.BRIGHT:
            method = bulb.bg_adjust_bright if bg else bulb.adjust_bright
        elif prop is Prop.CT:
            method = bulb.bg_adjust_ct if bg else bulb.adjust_ct
        else:
            method = bulb.bg_adjust_color if bg else bulb.adjust_color
        return await method(percent, duration)

    _run(ctx, action)


@main.command("music-connect")
@click.argument("host")
@click.argument("port", type=int)
@click.pass_context
def music_connect(ctx, host, port):
    """Ask the bulb to connect to a music TCP stream."""
    _run(ctx, lambda bulb: bulb.set_music(MusicAction.ON, host, port))


@main.command("music-stop")
@click.pass_context
def music_stop(ctx):
    """Stop music mode."""
    _run(ctx, lambda bulb: bulb.set_music(MusicAction.OFF, "", 0))


@main.command()
@click.argument("preset", type=click.Choice([p.value for p in Preset], case_sensitive=False))
@click.pass_context
def preset(ctx, preset):
    """Apply a preset."""
    _run(ctx, lambda bulb: apply_preset(bulb, Preset(preset.lower())))


@main.command()
@click.pass_context
def listen(ctx):
    """Listen to notifications from lamp."""
    async def action(bulb):
        async for notification in bulb.get_notifications():
            for key, value in notification.params.items():
                click.echo(f"{key} {value}")
        return None

    try:
        _run(ctx, action)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
