"""Formatter flags that tell where a firehose entry's base format string lives."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .reader import ByteReader, ParseError

logger = logging.getLogger(__name__)

_MAIN_EXE = 0x2
_LARGE_SHARED_CACHE = 0xC
_LARGE_OFFSET = 0x20
_FLAG_CHECK = 0xE


@dataclass
class FirehoseFormatters:
    """Where a log entry's format string is stored."""

    main_exe: bool = False
    shared_cache: bool = False
    has_large_offset: int = 0
    large_shared_cache: int = 0
    absolute: bool = False
    uuid_relative: str = ""
    main_plugin: bool = False
    pc_style: bool = False
    main_exe_alt_index: int = 0


def parse_formatter_flags(
    data: bytes, firehose_flags: int
) -> tuple[FirehoseFormatters, bytes]:
    """Parse the formatter fields selected by ``firehose_flags``.

    Returns the formatters and the bytes that follow them.
    """
    formatters = FirehoseFormatters()
    reader = ByteReader(data)

    match firehose_flags & _FLAG_CHECK:
        case 0xC:
            logger.debug("Firehose flag: large_shared_cache")
            if firehose_flags & _LARGE_OFFSET:
                formatters.has_large_offset = reader.u16()
            formatters.large_shared_cache = reader.u16()
        case 0x8:
            logger.debug("Firehose flag: absolute")
            formatters.absolute = True
            if not firehose_flags & _MAIN_EXE:
                formatters.main_exe_alt_index = reader.u16()
        case 0x2:
            logger.debug("Firehose flag: main_exe")
            formatters.main_exe = True
        case 0x4:
            logger.debug("Firehose flag: shared_cache")
            formatters.shared_cache = True
            if firehose_flags & _LARGE_OFFSET:
                formatters.has_large_offset = reader.u16()
        case 0xA:
            logger.debug("Firehose flag: uuid_relative")
            value = int.from_bytes(reader.read(16), "big")
            formatters.uuid_relative = format(value, "X")
        case _:
            logger.error("Unknown Firehose formatter flag: %d", firehose_flags)
            raise ParseError(f"unknown firehose formatter flag: {firehose_flags}")

    return formatters, reader.rest()