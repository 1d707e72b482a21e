"""
Discovery — SSDP-style multicast search for bulbs on the local network

One M-SEARCH probe is sent to 239.255.255.250:1982; every bulb answers with
an "HTTP/1.1 200 OK" datagram of "key: value" headers. Answers are
deduplicated by the bulb's hex id.
"""

import asyncio
import socket
from typing import AsyncIterator, Dict, List, Optional, Tuple

from yeelink.config import Config
from yeelink.connection.bulb import Bulb
from yeelink.connection.logger import get_logger

log = get_logger("discovery")

STATUS_LINE = "HTTP/1.1 200 OK"
LOCATION_SCHEME = "yeelight://"


def search_payload() -> bytes:
    host, port = Config.MULTICAST_ADDR
    return (
        "M-SEARCH * HTTP/1.1\r\n"
        f"HOST: {host}:{port}\r\n"
        'MAN: "ssdp:discover"\r\n'
        "ST: wifi_bulb\r\n"
    ).encode("ascii")


def parse_response(data: bytes) -> Optional[Tuple[int, Dict[str, str]]]:
    """Return (uid, headers) for a search answer, None for anything else."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None

    lines = text.split("\r\n")
    if lines[0] != STATUS_LINE:
        return None

    headers: Dict[str, str] = {}
    for line in lines[1:]:
        key, sep, value = line.partition(": ")
        if sep and key:
            headers[key] = value

    raw_id = headers.get("id")
    if raw_id is None:
        return None
    try:
        uid = int(raw_id[2:] if raw_id.lower().startswith("0x") else raw_id, 16)
    except ValueError:
        return None
    return uid, headers


class DiscoveredBulb:
    """A bulb that answered the search. Equal to another iff same uid."""

    __slots__ = ("uid", "address", "properties")

    def __init__(self, uid: int, address: Tuple[str, int], properties: Dict[str, str]):
        self.uid = uid
        self.address = address
        self.properties = properties

    @property
    def location(self) -> str:
        """host:port the bulb accepts commands on."""
        location = self.properties.get("Location", "")
        if location.startswith(LOCATION_SCHEME):
            location = location[len(LOCATION_SCHEME):]
        return location

    @property
    def name(self) -> str:
        return self.properties.get("name", "")

    async def connect(self) -> Bulb:
        host, _, port = self.location.rpartition(":")
        if not host:
            host, port = self.address[0], ""
        return await Bulb.connect(host, int(port) if port.isdigit() else 0)

    def __eq__(self, other):
        if not isinstance(other, DiscoveredBulb):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self):
        return hash(self.uid)

    def __repr__(self):
        return f"DiscoveredBulb(uid={self.uid:#x}, location={self.location!r}, name={self.name!r})"


class _SearchProtocol(asyncio.DatagramProtocol):
    def __init__(self, queue: asyncio.Queue):
        self._queue = queue

    def datagram_received(self, data: bytes, addr):
        parsed = parse_response(data)
        if parsed is None:
            log.debug(f"Ignoring datagram from {addr}")
            return
        uid, headers = parsed
        self._queue.put_nowait(DiscoveredBulb(uid, addr, headers))

    def error_received(self, exc):
        log.warning(f"Discovery socket error: {exc}")


async def discover(timeout: Optional[float] = 5.0) -> AsyncIterator[DiscoveredBulb]:
    """
    Yield every distinct bulb answering within timeout seconds.
    A timeout of None or 0 searches until the caller stops iterating.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    transport, _ = await loop.create_datagram_endpoint(
        lambda: _SearchProtocol(queue),
        local_addr=("0.0.0.0", Config.DISCOVERY_BIND_PORT),
        family=socket.AF_INET,
    )
    log.info(f"Searching for bulbs (timeout={timeout})")

    try:
        transport.sendto(search_payload(), Config.MULTICAST_ADDR)
        seen = set()
        deadline = loop.time() + timeout if timeout else None
        while True:
            if deadline is None:
                found = await queue.get()
            else:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    return
                try:
                    found = await asyncio.wait_for(queue.get(), remaining)
                except asyncio.TimeoutError:
                    return
            if found.uid in seen:
                continue
            seen.add(found.uid)
            log.info(f"Found {found!r}")
            yield found
    finally:
        transport.close()


async def find_bulbs(timeout: float = 5.0) -> List[DiscoveredBulb]:
    """Collect the distinct bulbs answering within timeout seconds."""
    return [found async for found in discover(timeout)]
