"""The kernel key retention facility: ``/proc/keys`` and ``/proc/key-users``."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterator, List, Optional, Union

from .core import FromRead, InternalError, _iter_lines, expect, parse_int


def _parse_uint(text: str, bits: int, what: str, radix: int = 10) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, radix, what)
    if value >= 1 << bits:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


class KeyFlags(enum.IntFlag):
    """State flags of a key."""

    INSTANTIATED = 0x01
    REVOKED = 0x02
    DEAD = 0x04
    QUOTA = 0x08
    UNDER_CONSTRUCTION = 0x10
    NEGATIVE = 0x20
    INVALID = 0x40

    @classmethod
    def from_str(cls, text):
        """Parse the positional flag string, such as ``I--Q---``."""
        letters = (
            ("I", cls.INSTANTIATED),
            ("R", cls.REVOKED),
            ("D", cls.DEAD),
            ("Q", cls.QUOTA),
            ("U", cls.UNDER_CONSTRUCTION),
            ("N", cls.NEGATIVE),
            ("i", cls.INVALID),
        )
        flags = cls(0)
        for char, (letter, flag) in zip(text, letters):
            if char == letter:
                flags |= flag
        return flags


class PermissionFlags(enum.IntFlag):
    """Permissions granted on a key to one class of accessor."""

    VIEW = 0x01
    READ = 0x02
    WRITE = 0x04
    SEARCH = 0x08
    LINK = 0x10
    SETATTR = 0x20
    ALL = 0x3F


def _permission_flags(part: str, text: str) -> PermissionFlags:
    value = _parse_uint(part, 32, "permissions", 16)
    if value & ~int(PermissionFlags.ALL):
        raise InternalError(
            f"Internal Unwrap Error: Unable to parse {text!r} as PermissionFlags"
        )
    return PermissionFlags(value)


@dataclass(frozen=True)
class Permissions:
    """Key permissions for the possessor, owning user, group and everyone else."""

    possessor: PermissionFlags
    user: PermissionFlags
    group: PermissionFlags
    other: PermissionFlags

    @classmethod
    def from_str(cls, text):
        """Parse the eight hex digits of a permission mask."""
        if len(text) < 8:
            raise InternalError(
                f"Internal Unwrap Error: Unable to parse {text!r} as PermissionFlags"
            )
        return cls(
            possessor=_permission_flags(text[0:2], text),
            user=_permission_flags(text[2:4], text),
            group=_permission_flags(text[4:6], text),
            other=_permission_flags(text[6:8], text),
        )


class TimeoutKind(enum.Enum):
    """Whether a key is permanent, expired, or expires after some time."""

    PERMANENT = "perm"
    EXPIRED = "expd"
    TIMEOUT = "timeout"


_UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 60 * 60 * 24, "w": 60 * 60 * 24 * 7}


@dataclass(frozen=True)
class KeyTimeout:
    """The expiry state of a key; ``duration`` is set only for ``TimeoutKind.TIMEOUT``."""

    kind: TimeoutKind
    duration: Optional[timedelta] = None

    @classmethod
    def from_str(cls, text):
        """Parse ``perm``, ``expd`` or a number followed by one of ``s m h d w``."""
        if text == "perm":
            return cls(TimeoutKind.PERMANENT)
        if text == "expd":
            return cls(TimeoutKind.EXPIRED)
        if not text:
            raise InternalError("Internal Unwrap Error: Unable to parse keytimeout of ''")
        value = _parse_uint(text[:-1], 64, "timeout")
        unit = text[-1]
        if unit not in _UNIT_SECONDS:
            raise InternalError(f"Internal Unwrap Error: Unable to parse keytimeout of {text!r}")
        return cls(TimeoutKind.TIMEOUT, timedelta(seconds=value * _UNIT_SECONDS[unit]))


class KeyType(enum.Enum):
    """The common key types; any other type is kept as its name."""

    USER = "user"
    KEYRING = "keyring"
    LOGON = "logon"
    BIG_KEY = "big_key"

    @classmethod
    def parse(cls, text):
        """Return the matching member, or ``text`` itself for other key types."""
        try:
            return cls(text)
        except ValueError:
            return text


@dataclass
class Key:
    """One key from ``/proc/keys``."""

    id: int
    flags: KeyFlags
    usage: int
    timeout: KeyTimeout
    permissions: Permissions
    uid: int
    gid: Optional[int]
    key_type: Union[KeyType, str]
    description: str

    @classmethod
    def from_line(cls, line):
        """Parse one line of ``/proc/keys``."""
        fields = iter(line.split())
        key_id = _parse_uint(expect(next(fields, None), "id"), 64, "id", 16)
        flags_text = expect(next(fields, None), "flags")
        usage = _parse_uint(expect(next(fields, None), "usage"), 32, "usage")
        timeout_text = expect(next(fields, None), "timeout")
        perms_text = expect(next(fields, None), "permissions")
        uid = _parse_uint(expect(next(fields, None), "uid"), 32, "uid")
        gid_text = expect(next(fields, None), "gid")
        type_text = expect(next(fields, None), "type")
        description = " ".join(fields)
        return cls(
            id=key_id,
            flags=KeyFlags.from_str(flags_text),
            usage=usage,
            timeout=KeyTimeout.from_str(timeout_text),
            permissions=Permissions.from_str(perms_text),
            uid=uid,
            gid=None if gid_text == "-1" else _parse_uint(gid_text, 32, "gid"),
            key_type=KeyType.parse(type_text),
            description=description,
        )


@dataclass
class Keys(FromRead):
    """All keys visible to the reader."""

    keys: List[Key] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        return cls([Key.from_line(line) for line in _iter_lines(reader)])

    def __iter__(self) -> Iterator[Key]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)


def _pair(text: str, what: str):
    parts = text.split("/")
    first = _parse_uint(parts[0], 32, what)
    second = _parse_uint(expect(parts[1] if len(parts) > 1 else None, what), 32, what)
    return first, second


@dataclass
class KeyUser:
    """Key usage and quotas of one user."""

    uid: int
    usage: int
    nkeys: int
    nikeys: int
    qnkeys: int
    maxkeys: int
    qnbytes: int
    maxbytes: int

    @classmethod
    def from_line(cls, line):
        """Parse one line of ``/proc/key-users``."""
        fields = iter(line.split())
        uid_text = expect(next(fields, None), "uid")
        usage = _parse_uint(expect(next(fields, None), "usage"), 32, "usage")
        keys = expect(next(fields, None), "keys")
        qkeys = expect(next(fields, None), "qkeys")
        qbytes = expect(next(fields, None), "qbytes")

        nkeys, nikeys = _pair(keys, "keys")
        qnkeys, maxkeys = _pair(qkeys, "qkeys")
        qnbytes, maxbytes = _pair(qbytes, "qbytes")
        return cls(
            uid=_parse_uint(uid_text[:-1], 32, "uid"),
            usage=usage,
            nkeys=nkeys,
            nikeys=nikeys,
            qnkeys=qnkeys,
            maxkeys=maxkeys,
            qnbytes=qnbytes,
            maxbytes=maxbytes,
        )


@dataclass
class KeyUsers(FromRead):
    """Users that own at least one key, by user ID."""

    users: Dict[int, KeyUser] = field(default_factory=dict)

    @classmethod
    def from_read(cls, reader):
        users: Dict[int, KeyUser] = {}
        for line in _iter_lines(reader):
            user = KeyUser.from_line(line)
            users[user.uid] = user
        return cls(users)