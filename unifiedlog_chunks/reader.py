"""Little-endian byte reading helpers and the lookup records used to resolve format strings."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field


class ParseError(ValueError):
    """Raised when log data is truncated or holds values that cannot be parsed."""


class ByteReader:
    """Sequential reader over a bytes-like object, consuming values in little-endian order."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def offset(self) -> int:
        """Number of bytes consumed so far."""
        return self._pos

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos

    def __len__(self) -> int:
        return self.remaining

    def read(self, size: int) -> bytes:
        """Consume and return exactly ``size`` bytes."""
        if size < 0:
            raise ParseError(f"cannot read a negative number of bytes: {size}")
        if size > self.remaining:
            raise ParseError(
                f"need {size} bytes at offset {self._pos}, only {self.remaining} left"
            )
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def _unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        (value,) = struct.unpack(fmt, self.read(size))
        return value

    def u8(self) -> int:
        return self._unpack("<B")

    def u16(self) -> int:
        return self._unpack("<H")

    def u32(self) -> int:
        return self._unpack("<I")

    def u64(self) -> int:
        return self._unpack("<Q")

    def rest(self) -> bytes:
        """Consume and return everything that is left."""
        return self.read(self.remaining)


def extract_string(data: bytes) -> str:
    """Decode a NUL-terminated string from the start of ``data``.

    Without a terminator the whole buffer is decoded. Empty input is an error.
    """
    if not data:
        raise ParseError("cannot extract a string from empty data")
    raw = bytes(data).split(b"\x00", 1)[0]
    return raw.decode("utf-8", errors="replace")


def format_uuid(data: bytes) -> str:
    """Render raw UUID bytes as upper-case hex with no separators."""
    return bytes(data).hex().upper()


@dataclass
class UUIDTextEntry:
    """One string range in a UUID text file."""

    range_start_offset: int = 0
    entry_size: int = 0


@dataclass
class UUIDText:
    """A parsed UUID text file: its string ranges and the string footer."""

    uuid: str = ""
    entry_descriptors: list[UUIDTextEntry] = field(default_factory=list)
    footer_data: bytes = b""


@dataclass
class UUIDDescriptor:
    """An image referenced by a shared cache strings file."""

    uuid: str = ""
    path_string: str = ""


@dataclass
class RangeDescriptor:
    """A range of format strings within a shared cache strings file."""

    range_offset: int = 0
    range_size: int = 0
    unknown_uuid_index: int = 0
    strings: bytes = b""


@dataclass
class SharedCacheStrings:
    """A parsed shared cache strings (dsc) file."""

    dsc_uuid: str = ""
    ranges: list[RangeDescriptor] = field(default_factory=list)
    uuids: list[UUIDDescriptor] = field(default_factory=list)


@dataclass
class UUIDInfo:
    """A loaded image of a process, with its load address and size."""

    uuid: str = ""
    load_address: int = 0
    size: int = 0


@dataclass
class ProcessInfo:
    """Catalog entry describing one process."""

    first_number_proc_id: int = 0
    second_number_proc_id: int = 0
    main_uuid: str = ""
    dsc_uuid: str = ""
    uuid_info_entries: list[UUIDInfo] = field(default_factory=list)


@dataclass
class CatalogChunk:
    """The catalog of processes that log entries refer to."""

    catalog_process_info_entries: list[ProcessInfo] = field(default_factory=list)