"""
Error taxonomy for bulb connections

  BulbIoError       transport failure (fatal to the connection)
  MalformedMessage  undecodable line (fatal to the connection)
  ErrResponse       device rejected one request (local, recoverable)
  ConnectionClosed  the reply was never received (connection went away)
  BulbConnectError  could not establish the connection at all
"""

from typing import Optional


class BulbError(Exception):
    """Base class for every error raised by a bulb connection."""


class BulbIoError(BulbError):
    """Socket read/write failure."""


class MalformedMessage(BulbError):
    """A line from the device is not one of the known wire shapes."""

    def __init__(self, message: str, line: Optional[bytes] = None):
        self.line = line
        super().__init__(message)


class ErrResponse(BulbError):
    """Error reply sent by the device for one request."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Bulb response error: {message} (code {code})")

    def __eq__(self, other):
        if not isinstance(other, ErrResponse):
            return NotImplemented
        return (self.code, self.message) == (other.code, other.message)

    def __hash__(self):
        return hash((self.code, self.message))


class ConnectionClosed(BulbError):
    """The connection ended before a reply for the request arrived."""


class BulbConnectError(BulbError):
    """Dial, attach or accept failed."""
