"""Networking tables from ``/proc/net``: sockets, ARP, interface statistics and routes."""

from __future__ import annotations

import enum
import string
import sys
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .core import FromRead, FromReadSI, InternalError, _iter_lines, expect, parse_int

SocketAddress = Tuple[Union[IPv4Address, IPv6Address], int]


def _parse_uint(text: str, bits: int, what: str, radix: int = 10) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, radix, what)
    if value >= 1 << bits:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


def _to_state(enum_cls, value: int, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InternalError(f"Internal Unwrap Error: {what}: unknown state {value:#x}") from None


def _skip_header(reader, count: int) -> Iterator[str]:
    lines = _iter_lines(reader)
    for _ in range(count):
        next(lines, None)
    return lines


class TcpState(enum.IntEnum):
    """The state of a TCP socket."""

    ESTABLISHED = 0x01
    SYN_SENT = 0x02
    SYN_RECV = 0x03
    FIN_WAIT1 = 0x04
    FIN_WAIT2 = 0x05
    TIME_WAIT = 0x06
    CLOSE = 0x07
    CLOSE_WAIT = 0x08
    LAST_ACK = 0x09
    LISTEN = 0x0A
    CLOSING = 0x0B
    NEW_SYN_RECV = 0x0C


class UdpState(enum.IntEnum):
    """The state of a UDP socket."""

    ESTABLISHED = 0x01
    CLOSE = 0x07


class UnixState(enum.IntEnum):
    """The state of a Unix domain socket."""

    UNCONNECTED = 0x01
    CONNECTING = 0x02
    CONNECTED = 0x03
    DISCONNECTING = 0x04


@dataclass
class TcpNetEntry:
    """An entry of the TCP socket table."""

    local_address: SocketAddress
    remote_address: SocketAddress
    state: TcpState
    rx_queue: int
    tx_queue: int
    uid: int
    inode: int


@dataclass
class UdpNetEntry:
    """An entry of the UDP socket table."""

    local_address: SocketAddress
    remote_address: SocketAddress
    state: UdpState
    rx_queue: int
    tx_queue: int
    uid: int
    inode: int


@dataclass
class UnixNetEntry:
    """An entry of the Unix socket table; abstract socket paths start with ``@``."""

    ref_count: int
    socket_type: int
    state: UnixState
    inode: int
    path: Optional[PurePosixPath] = None


def parse_address_port(text, little_endian):
    """Parse ``HEXADDR:HEXPORT`` as written in the socket tables, for IPv4 or IPv6."""
    parts = text.split(":")
    ip_part = expect(parts[0], "ip_part")
    port_text = expect(parts[1] if len(parts) > 1 else None, "port")
    port = _parse_uint(port_text, 16, "port", 16)
    byteorder = "little" if little_endian else "big"

    if len(ip_part) not in (8, 32):
        raise InternalError(f"Internal Unwrap Error: Unable to parse {text!r} as an address:port")
    if not all(c in string.hexdigits for c in ip_part):
        raise InternalError(f"Internal Unwrap Error: Invalid hex address {ip_part!r}")
    raw = bytes.fromhex(ip_part)

    words = [int.from_bytes(raw[pos:pos + 4], byteorder) for pos in range(0, len(raw), 4)]
    if len(words) == 1:
        return IPv4Address(words[0]), port
    value = 0
    for word in words:
        value = (value << 32) | word
    return IPv6Address(value), port


def _socket_fields(line: str, proto: str, little_endian: bool):
    fields = iter(line.split())
    next(fields, None)
    local_text = expect(next(fields, None), f"{proto}::local_address")
    remote_text = expect(next(fields, None), f"{proto}::rem_address")
    state_text = expect(next(fields, None), f"{proto}::st")
    queues = expect(next(fields, None), f"{proto}::tx_queue:rx_queue").split(":", 1)
    tx_queue = _parse_uint(queues[0], 32, f"{proto}::tx_queue", 16)
    rx_queue = _parse_uint(
        expect(queues[1] if len(queues) > 1 else None, f"{proto}::rx_queue"),
        32,
        f"{proto}::rx_queue",
        16,
    )
    next(fields, None)  # tr and tm->when
    next(fields, None)  # retrnsmt
    uid = _parse_uint(expect(next(fields, None), f"{proto}::uid"), 32, f"{proto}::uid")
    next(fields, None)  # timeout
    inode_text = expect(next(fields, None), f"{proto}::inode")
    return {
        "local_address": parse_address_port(local_text, little_endian),
        "remote_address": parse_address_port(remote_text, little_endian),
        "rx_queue": rx_queue,
        "tx_queue": tx_queue,
        "state": _parse_uint(state_text, 8, f"{proto}::st", 16),
        "uid": uid,
        "inode": _parse_uint(inode_text, 64, f"{proto}::inode"),
    }


@dataclass
class TcpNetEntries(FromReadSI):
    """The TCP socket table (``/proc/net/tcp`` or ``/proc/net/tcp6``)."""

    entries: List[TcpNetEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader, system_info):
        entries = []
        for line in _skip_header(reader, 1):
            values = _socket_fields(line, "tcp", system_info.is_little_endian)
            values["state"] = _to_state(TcpState, values["state"], "tcp::st")
            entries.append(TcpNetEntry(**values))
        return cls(entries)

    def __iter__(self) -> Iterator[TcpNetEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class UdpNetEntries(FromReadSI):
    """The UDP socket table (``/proc/net/udp`` or ``/proc/net/udp6``)."""

    entries: List[UdpNetEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader, system_info):
        entries = []
        for line in _skip_header(reader, 1):
            values = _socket_fields(line, "udp", system_info.is_little_endian)
            values["state"] = _to_state(UdpState, values["state"], "udp::st")
            entries.append(UdpNetEntry(**values))
        return cls(entries)

    def __iter__(self) -> Iterator[UdpNetEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class UnixNetEntries(FromRead):
    """The Unix domain socket table (``/proc/net/unix``)."""

    entries: List[UnixNetEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        entries = []
        for line in _skip_header(reader, 1):
            fields = iter(line.split())
            next(fields, None)  # table slot
            ref_count = _parse_uint(expect(next(fields, None), "ref_count"), 32, "ref_count", 16)
            next(fields, None)  # protocol
            next(fields, None)  # flags
            socket_type = _parse_uint(expect(next(fields, None), "type"), 16, "type", 16)
            state = _parse_uint(expect(next(fields, None), "state"), 8, "state", 16)
            inode = _parse_uint(expect(next(fields, None), "inode"), 64, "inode")
            path_text = next(fields, None)
            entries.append(
                UnixNetEntry(
                    ref_count=ref_count,
                    socket_type=socket_type,
                    state=_to_state(UnixState, state, "state"),
                    inode=inode,
                    path=None if path_text is None else PurePosixPath(path_text),
                )
            )
        return cls(entries)

    def __iter__(self) -> Iterator[UnixNetEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class ARPHardware(enum.IntFlag):
    """Hardware type of an ARP table entry."""

    NETROM = 0
    ETHER = 1
    EETHER = 2
    AX25 = 3
    PRONET = 4
    CHAOS = 5
    IEEE802 = 6
    ARCNET = 7
    APPLETLK = 8
    DLCI = 15
    ATM = 19
    METRICOM = 23
    IEEE1394 = 24
    EUI64 = 27
    INFINIBAND = 32


class ARPFlags(enum.IntFlag):
    """Flags of an ARP table entry."""

    COM = 0x02
    PERM = 0x04
    PUBL = 0x08
    USETRAILERS = 0x10
    NETMASK = 0x20
    DONTPUB = 0x40


_ARP_HW_MASK = 0x3F
_ARP_FLAGS_MASK = 0x7E


@dataclass
class ARPEntry:
    """An ARP table entry; ``hw_address`` is None when the address is all zeros."""

    ip_address: IPv4Address
    hw_type: ARPHardware
    flags: ARPFlags
    hw_address: Optional[bytes]
    device: str


def _hex_after_prefix(text: str, what: str) -> int:
    if len(text) < 2:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is too short")
    return _parse_uint(text[2:], 32, what, 16)


def _parse_mac(text: str) -> Optional[bytes]:
    parts = text.split(":")
    if len(parts) != 6:
        return None
    octets = bytes(_parse_uint(part, 8, "hw_address", 16) for part in parts)
    return None if not any(octets) else octets


@dataclass
class ArpEntries(FromRead):
    """The ARP table (``/proc/net/arp``)."""

    entries: List[ARPEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        entries = []
        for line in _skip_header(reader, 1):
            fields = iter(line.split())
            ip_text = expect(next(fields, None), "ip_address")
            try:
                ip_address = IPv4Address(ip_text)
            except ValueError as err:
                raise InternalError(f"Internal Unwrap Error: ip_address: {err}") from err
            hw_type = ARPHardware(_hex_after_prefix(expect(next(fields, None), "hw_type"), "hw_type") & _ARP_HW_MASK)
            flags = ARPFlags(_hex_after_prefix(expect(next(fields, None), "flags"), "flags") & _ARP_FLAGS_MASK)
            hw_address = _parse_mac(expect(next(fields, None), "hw_address"))
            expect(next(fields, None), "mask")
            device = expect(next(fields, None), "device")
            entries.append(ARPEntry(ip_address, hw_type, flags, hw_address, device))
        return cls(entries)

    def __iter__(self) -> Iterator[ARPEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


_DEVICE_COUNTERS = (
    "recv_bytes",
    "recv_packets",
    "recv_errs",
    "recv_drop",
    "recv_fifo",
    "recv_frame",
    "recv_compressed",
    "recv_multicast",
    "sent_bytes",
    "sent_packets",
    "sent_errs",
    "sent_drop",
    "sent_fifo",
    "sent_colls",
    "sent_carrier",
    "sent_compressed",
)


@dataclass
class DeviceStatus:
    """Receive and transmit counters of one network interface."""

    name: str
    recv_bytes: int
    recv_packets: int
    recv_errs: int
    recv_drop: int
    recv_fifo: int
    recv_frame: int
    recv_compressed: int
    recv_multicast: int
    sent_bytes: int
    sent_packets: int
    sent_errs: int
    sent_drop: int
    sent_fifo: int
    sent_colls: int
    sent_carrier: int
    sent_compressed: int

    @classmethod
    def from_line(cls, line):
        """Parse one interface line of ``/proc/net/dev``."""
        fields = iter(line.split())
        name = expect(next(fields, None), "name").rstrip(":")
        counters = {
            key: _parse_uint(expect(next(fields, None), key), 64, key) for key in _DEVICE_COUNTERS
        }
        return cls(name=name, **counters)


@dataclass
class InterfaceDeviceStatus(FromRead):
    """Counters of every network interface, by interface name."""

    devices: Dict[str, DeviceStatus] = field(default_factory=dict)

    @classmethod
    def from_read(cls, reader):
        devices: Dict[str, DeviceStatus] = {}
        for line in _skip_header(reader, 2):
            status = DeviceStatus.from_line(line)
            devices[status.name] = status
        return cls(devices)


def _native_ipv4(text: str, what: str) -> IPv4Address:
    value = _parse_uint(text, 32, what, 16)
    return IPv4Address(value.to_bytes(4, sys.byteorder))


@dataclass
class RouteEntry:
    """An entry of the IPv4 routing table."""

    iface: str
    destination: IPv4Address
    gateway: IPv4Address
    flags: int
    refcnt: int
    in_use: int
    metrics: int
    mask: IPv4Address
    mtu: int
    window: int
    irtt: int


@dataclass
class RouteEntries(FromRead):
    """The IPv4 routing table (``/proc/net/route``)."""

    entries: List[RouteEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        entries = []
        for line in _skip_header(reader, 1):
            fields = iter(line.split())
            iface = expect(next(fields, None), "iface")
            destination = _native_ipv4(expect(next(fields, None), "destination"), "destination")
            gateway = _native_ipv4(expect(next(fields, None), "gateway"), "gateway")
            flags = _parse_uint(expect(next(fields, None), "flags"), 16, "flags", 16)
            refcnt = _parse_uint(expect(next(fields, None), "refcnt"), 16, "refcnt")
            in_use = _parse_uint(expect(next(fields, None), "in_use"), 16, "in_use")
            metrics = _parse_uint(expect(next(fields, None), "metrics"), 32, "metrics")
            mask = _native_ipv4(expect(next(fields, None), "mask"), "mask")
            mtu = _parse_uint(expect(next(fields, None), "mtu"), 32, "mtu")
            window = _parse_uint(expect(next(fields, None), "window"), 32, "window")
            irtt = _parse_uint(expect(next(fields, None), "irtt"), 32, "irtt")
            entries.append(
                RouteEntry(iface, destination, gateway, flags, refcnt, in_use, metrics, mask, mtu, window, irtt)
            )
        return cls(entries)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)