"""Errors, parsing helpers and the reader protocols shared by every parser."""

from __future__ import annotations

import abc
import errno
import io
import os
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator, Optional, Protocol, TextIO, Tuple, TypeVar, runtime_checkable

T = TypeVar("T")

_DIGITS = string.digits + string.ascii_lowercase


class ProcError(Exception):
    """Base class of every error raised while reading procfs data."""

    _accepts_path = False

    def __init__(self, *args: Any, path: Optional[str] = None) -> None:
        super().__init__(*args)
        self.path = path

    def with_path(self, path):
        """Record the originating file, unless one is already known or the error takes none."""
        if self._accepts_path and self.path is None:
            self.path = os.fspath(path)
        return self


class PermissionDeniedError(ProcError):
    """The file is not readable by the current user."""

    _accepts_path = True

    def __str__(self) -> str:
        return f"Permission Denied: {self.path}" if self.path else "Permission Denied"


class NotFoundError(ProcError):
    """The file, or the process it belongs to, does not exist."""

    _accepts_path = True

    def __str__(self) -> str:
        return f"File not found: {self.path}" if self.path else "File not found"


class IncompleteError(ProcError):
    """The file contents were incomplete; retrying may help."""

    _accepts_path = True

    def __str__(self) -> str:
        return f"Data incomplete: {self.path}" if self.path else "Data incomplete"


class ProcIOError(ProcError):
    """Any other I/O failure."""

    _accepts_path = True

    def __init__(self, inner: BaseException, path: Optional[str] = None) -> None:
        super().__init__(inner, path=path)
        self.inner = inner

    def __str__(self) -> str:
        if self.path:
            return f"Unexpected IO error({self.path}): {self.inner}"
        return f"Unexpected IO error: {self.inner}"


class OtherError(ProcError):
    """A non-I/O failure that fits no other category."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Unknown error {self.message}"


class InternalError(ProcError):
    """Data did not have the expected shape; a parsing bug or an unexpected format."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return f"Internal error: {self.msg}"


def _internal(err: object, what: Optional[str] = None) -> InternalError:
    if what is None:
        return InternalError(f"Internal Unwrap Error: {err}")
    return InternalError(f"Internal Unwrap Error: {what}: {err}")


def error_from_os(err: OSError, path=None) -> ProcError:
    """Convert an ``OSError`` into the matching ``ProcError``."""
    path = None if path is None else os.fspath(path)
    if isinstance(err, PermissionError):
        return PermissionDeniedError(path=path)
    if isinstance(err, FileNotFoundError) or err.errno == errno.ESRCH:
        return NotFoundError(path=path)
    return ProcIOError(err, path=path)


@runtime_checkable
class SystemInfo(Protocol):
    """Facts about the running system that some parsers need."""

    boot_time_secs: int
    ticks_per_second: int
    page_size: int
    is_little_endian: bool


@dataclass(frozen=True)
class ExplicitSystemInfo:
    """System information given by explicit values."""

    boot_time_secs: int
    ticks_per_second: int
    page_size: int
    is_little_endian: bool


def boot_time(system_info: SystemInfo) -> datetime:
    """Return the boot time as an aware datetime in the local time zone."""
    try:
        return datetime.fromtimestamp(system_info.boot_time_secs).astimezone()
    except (OverflowError, OSError, ValueError) as err:
        raise _internal(err, "boot time") from err


def expect(value: Optional[T], what: Optional[str] = None) -> T:
    """Return ``value``, raising ``InternalError`` if it is missing."""
    if value is None:
        raise _internal("NoneError", what)
    return value


def parse_int(text: str, radix: int = 10, what: Optional[str] = None) -> int:
    """Parse an integer strictly: an optional sign followed by digits of ``radix``."""
    if not isinstance(text, str):
        raise _internal(f"cannot parse {text!r} as an integer", what)
    body = text[1:] if text.startswith(("+", "-")) else text
    valid = _DIGITS[:radix]
    if not body or any(c.lower() not in valid for c in body):
        raise _internal(f"Failed to parse {text!r} as an integer (radix {radix})", what)
    return int(text, radix)


def split_into_num(text: str, sep: str, radix: int) -> Tuple[int, int]:
    """Split ``text`` on ``sep`` and parse the first two parts as integers."""
    parts = text.split(sep)
    if len(parts) < 2:
        raise _internal("NoneError", f"expected two values separated by {sep!r} in {text!r}")
    return parse_int(parts[0], radix), parse_int(parts[1], radix)


def _iter_lines(reader: TextIO) -> Iterator[str]:
    """Yield the lines of ``reader`` without their line terminators."""
    for line in reader:
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        yield line


def _open_and_parse(path, parse):
    try:
        with open(path, encoding="utf-8") as handle:
            return parse(handle)
    except OSError as err:
        raise error_from_os(err, path) from err
    except UnicodeDecodeError as err:
        raise ProcIOError(err, path=os.fspath(path)) from err
    except ProcError as err:
        raise err.with_path(path)


class FromRead(abc.ABC):
    """Types that can be parsed from a text stream."""

    @classmethod
    @abc.abstractmethod
    def from_read(cls, reader):
        """Parse an instance from a text stream."""

    @classmethod
    def from_text(cls, text):
        """Parse an instance from a string."""
        return cls.from_read(io.StringIO(text))

    @classmethod
    def from_file(cls, path):
        """Parse an instance from the file at ``path``."""
        return _open_and_parse(path, cls.from_read)


class FromReadSI(abc.ABC):
    """Types that need system information to be parsed from a text stream."""

    @classmethod
    @abc.abstractmethod
    def from_read(cls, reader, system_info):
        """Parse an instance from a text stream and system information."""

    @classmethod
    def from_text(cls, text, system_info):
        """Parse an instance from a string and system information."""
        return cls.from_read(io.StringIO(text), system_info)

    @classmethod
    def from_file(cls, path, system_info):
        """Parse an instance from the file at ``path``."""
        return _open_and_parse(path, lambda handle: cls.from_read(handle, system_info))