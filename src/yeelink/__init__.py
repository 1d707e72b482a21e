"""yeelink — asyncio client for Yeelight smart lights."""

__version__ = "0.1.0"

from yeelink.connection.bulb import Bulb, ConnectionState
from yeelink.connection.errors import (
    BulbConnectError,
    BulbError,
    BulbIoError,
    ConnectionClosed,
    ErrResponse,
    MalformedMessage,
)
from yeelink.connection.protocol import Notification
from yeelink.types import (
    AdjustAction,
    CfAction,
    CronType,
    Effect,
    FlowExpression,
    FlowMode,
    FlowTuple,
    Mode,
    MusicAction,
    Power,
    Prop,
    Properties,
    Property,
    SceneClass,
)

__all__ = [
    "Bulb", "ConnectionState", "Notification",
    "BulbError", "BulbIoError", "BulbConnectError", "ConnectionClosed", "ErrResponse", "MalformedMessage",
    "AdjustAction", "CfAction", "CronType", "Effect", "FlowExpression", "FlowMode", "FlowTuple",
    "Mode", "MusicAction", "Power", "Prop", "Properties", "Property", "SceneClass",
]
