"""Non-activity firehose entries: parsing and resolving their format strings."""

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
_U64_MAX = 0xFFFFFFFFFFFFFFFF


@dataclass
class FirehoseNonActivity:
    """A parsed non-activity (log) firehose entry."""

    unknown_activity_id: int = 0
    unknown_sentinal: int = 0
    private_strings_offset: int = 0
    private_strings_size: int = 0
    unknown_message_string_ref: int = 0
    subsystem_value: int = 0
    ttl_value: int = 0
    data_ref_value: int = 0
    unknown_pc_id: int = 0
    firehose_formatters: FirehoseFormatters = field(default_factory=FirehoseFormatters)


def parse_non_activity(
    data: bytes, firehose_flags: int
) -> tuple[FirehoseNonActivity, bytes]:
    """Parse a non-activity firehose entry, returning it and the bytes that follow."""
    entry = FirehoseNonActivity()
    reader = ByteReader(data)

    if firehose_flags & _CURRENT_AID:
        logger.debug("Non-Activity Firehose log chunk has has_current_aid flag")
        entry.unknown_activity_id = reader.u32()
        entry.unknown_sentinal = reader.u32()

    # Private strings are found after all the public data of the chunk.
    if firehose_flags & _PRIVATE_DATA:
        logger.debug("Non-Activity Firehose log chunk has has_private_data flag")
        entry.private_strings_offset = reader.u16()
        entry.private_strings_size = reader.u16()

    entry.unknown_pc_id = reader.u32()

    formatters, rest = parse_formatter_flags(reader.rest(), firehose_flags)
    entry.firehose_formatters = formatters
    reader = ByteReader(rest)

    if firehose_flags & _SUBSYSTEM:
        logger.debug("Non-Activity Firehose log chunk has has_subsystem flag")
        entry.subsystem_value = reader.u16()

    if firehose_flags & _HAS_RULES:
        logger.debug("Non-Activity Firehose log chunk has has_rules flag")
        entry.ttl_value = reader.u8()

    if firehose_flags & _HAS_OVERSIZE:
        logger.debug("Non-Activity Firehose log chunk has has_oversize flag")
        entry.data_ref_value = reader.u32()

    return entry, reader.rest()


def _hex_join(high: int, low: int) -> int:
    """Join two numbers as their hex digits, the low one padded to eight digits."""
    value = int(f"{high:X}{low:08X}", 16)
    if value > _U64_MAX:
        raise ParseError(f"combined offset {value:#x} does not fit in 64 bits")
    return value


def _shared_cache_offset(formatters: FirehoseFormatters, string_offset: int) -> int:
    large_offset = formatters.has_large_offset
    # large_shared_cache is normally twice has_large_offset; if not, trust it.
    if large_offset != formatters.large_shared_cache // 2 and not formatters.shared_cache:
        return _hex_join(formatters.large_shared_cache // 2, string_offset)
    if formatters.shared_cache:
        value = 0x10000000 * 8 + string_offset
        if value > _U64_MAX:
            raise ParseError(f"shared cache offset {value:#x} does not fit in 64 bits")
        return value
    return _hex_join(large_offset, string_offset)


def get_firehose_nonactivity_strings(
    firehose: FirehoseNonActivity,
    strings_data: Sequence[UUIDText],
    shared_strings: Sequence[SharedCacheStrings],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
) -> MessageData:
    """Resolve the base format string of a non-activity entry from dsc or UUID text files."""
    formatters = firehose.firehose_formatters
    if formatters.shared_cache or formatters.large_shared_cache:
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
        absolute_offset = _hex_join(formatters.main_exe_alt_index, firehose.unknown_pc_id)
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