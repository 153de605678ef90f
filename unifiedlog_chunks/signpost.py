"""Signpost firehose entries: parsing and resolving their format strings."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .flags import FirehoseFormatters, parse_formatter_flags
from .message import MessageData, extract_format_strings, extract_shared_strings
from .reader import ByteReader, CatalogChunk, ParseError, SharedCacheStrings, UUIDText
from .uuid_strings import extract_absolute_strings, extract_alt_uuid_strings

logger = logging.getLogger(__name__)

_CURRENT_AID = 0x1
_PRIVATE_DATA = 0x100
_SUBSYSTEM = 0x200
_HAS_RULES = 0x400
_HAS_OVERSIZE = 0x800
_HAS_NAME = 0x8000
_U64_MAX = 0xFFFFFFFFFFFFFFFF


@dataclass
class FirehoseSignpost:
    """A parsed signpost firehose entry."""

    unknown_pc_id: int = 0
    unknown_activity_id: int = 0
    unknown_sentinel: int = 0
    subsystem: int = 0
    signpost_id: int = 0
    signpost_name: int = 0
    private_strings_offset: int = 0
    private_strings_size: int = 0
    ttl_value: int = 0
    data_ref_value: int = 0
    firehose_formatters: FirehoseFormatters = field(default_factory=FirehoseFormatters)


def parse_signpost(data: bytes, firehose_flags: int) -> tuple[FirehoseSignpost, bytes]:
    """Parse a signpost firehose entry, returning it and the bytes that follow."""
    signpost = FirehoseSignpost()
    reader = ByteReader(data)

    if firehose_flags & _CURRENT_AID:
        logger.debug("Signpost Firehose has has_current_aid flag")
        signpost.unknown_activity_id = reader.u32()
        signpost.unknown_sentinel = reader.u32()

    # Private strings are found after all the public data of the chunk.
    if firehose_flags & _PRIVATE_DATA:
        logger.debug("Signpost Firehose has has_private_data flag")
        signpost.private_strings_offset = reader.u16()
        signpost.private_strings_size = reader.u16()

    signpost.unknown_pc_id = reader.u32()

    formatters, rest = parse_formatter_flags(reader.rest(), firehose_flags)
    signpost.firehose_formatters = formatters
    reader = ByteReader(rest)

    if firehose_flags & _SUBSYSTEM:
        logger.debug("Signpost Firehose log chunk has has_subsystem flag")
        signpost.subsystem = reader.u16()

    signpost.signpost_id = reader.u64()

    if firehose_flags & _HAS_RULES:
        logger.debug("Signpost Firehose log chunk has has_rules flag")
        signpost.ttl_value = reader.u8()

    if firehose_flags & _HAS_OVERSIZE:
        logger.debug("Signpost Firehose log chunk has has_oversize flag")
        signpost.data_ref_value = reader.u32()

    if firehose_flags & _HAS_NAME:
        logger.debug("Signpost Firehose log chunk has has_name flag")
        signpost.signpost_name = reader.u32()
        # With large_shared_cache the name is followed by that value again.
        if formatters.large_shared_cache:
            reader.read(2)

    return signpost, reader.rest()


def _hex_value(digits: str) -> int:
    value = int(digits, 16)
    if value > _U64_MAX:
        raise ParseError(f"combined offset {value:#x} does not fit in 64 bits")
    return value


def _shared_cache_offset(formatters: FirehoseFormatters, string_offset: int) -> int:
    large_offset = formatters.has_large_offset
    # large_shared_cache is normally twice has_large_offset; if not, trust it.
    if large_offset != formatters.large_shared_cache // 2 and not formatters.shared_cache:
        return _hex_value(f"{formatters.large_shared_cache // 2:X}{string_offset:08X}")
    if formatters.shared_cache:
        return _hex_value(f"8{string_offset:07X}")
    return _hex_value(f"{large_offset:X}{string_offset:08X}")


def get_firehose_signpost(
    firehose: FirehoseSignpost,
    strings_data: Sequence[UUIDText],
    shared_strings: Sequence[SharedCacheStrings],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
) -> MessageData:
    """Resolve the base format string of a signpost entry from dsc or UUID text files."""
    formatters = firehose.firehose_formatters
    if formatters.shared_cache or (
        formatters.large_shared_cache and formatters.has_large_offset
    ):
        offset = string_offset
        if formatters.has_large_offset:
            offset = _shared_cache_offset(formatters, string_offset)
        return extract_shared_strings(
            shared_strings,
            strings_data,
            offset,
            first_proc_id,
            second_proc_id,
            catalogs,
            string_offset,
        )

    if formatters.absolute:
        absolute_offset = _hex_value(
            f"{formatters.main_exe_alt_index:X}{firehose.unknown_pc_id:08X}"
        )
        return extract_absolute_strings(
            strings_data,
            absolute_offset,
            string_offset,
            first_proc_id,
            second_proc_id,
            catalogs,
            string_offset,
        )

    if formatters.uuid_relative:
        return extract_alt_uuid_strings(
            strings_data,
            string_offset,
            formatters.uuid_relative,
            first_proc_id,
            second_proc_id,
            catalogs,
            string_offset,
        )

    return extract_format_strings(
        strings_data,
        string_offset,
        first_proc_id,
        second_proc_id,
        catalogs,
        string_offset,
    )