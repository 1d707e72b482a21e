"""yeelink connection — socket multiplexer for one bulb."""

from yeelink.connection.bulb import Bulb, ConnectionState
from yeelink.connection.sink import NotificationSink, NotificationStream
from yeelink.connection.pending import PendingReplies

__all__ = ["Bulb", "ConnectionState", "NotificationSink", "NotificationStream", "PendingReplies"]
