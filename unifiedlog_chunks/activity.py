"""Activity firehose entries: parsing and resolving their format strings."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .flags import FirehoseFormatters, parse_formatter_flags
from .message import MessageData, extract_format_strings, extract_shared_strings
from .reader import ByteReader, CatalogChunk, ParseError, SharedCacheStrings, UUIDText
from .uuid_strings import extract_absolute_strings, extract_alt_uuid_strings

logger = logging.getLogger(__name__)

_USERACTION = 0x3
_UNIQUE_PID = 0x10
_CURRENT_AID = 0x1
_OTHER_AID = 0x200
_U64_MAX = 0xFFFFFFFFFFFFFFFF


@dataclass
class FirehoseActivity:
    """A parsed activity firehose entry."""

    unknown_activity_id: int = 0
    unknown_sentinal: int = 0
    pid: int = 0
    unknown_activity_id_2: int = 0
    unknown_sentinal_2: int = 0
    unknown_activity_id_3: int = 0
    unknown_sentinal_3: int = 0
    unknown_message_string_ref: int = 0
    unknown_pc_id: int = 0
    firehose_formatters: FirehoseFormatters = field(default_factory=FirehoseFormatters)


def parse_activity(
    data: bytes, firehose_flags: int, firehose_log_type: int
) -> tuple[FirehoseActivity, bytes]:
    """Parse an activity firehose entry, returning it and the bytes that follow."""
    activity = FirehoseActivity()
    reader = ByteReader(data)

    # Useraction entries have no leading activity id or sentinel.
    if firehose_log_type != _USERACTION:
        activity.unknown_activity_id = reader.u32()
        activity.unknown_sentinal = reader.u32()

    if firehose_flags & _UNIQUE_PID:
        logger.debug("Activity Firehose log chunk has unique_pid flag")
        activity.pid = reader.u64()

    if firehose_flags & _CURRENT_AID:
        logger.debug("Activity Firehose log chunk has has_current_aid flag")
        activity.unknown_activity_id_2 = reader.u32()
        activity.unknown_sentinal_2 = reader.u32()

    if firehose_flags & _OTHER_AID:
        logger.debug("Activity Firehose log chunk has has_other_current_aid flag")
        activity.unknown_activity_id_3 = reader.u32()
        activity.unknown_sentinal_3 = reader.u32()

    activity.unknown_pc_id = reader.u32()

    formatters, rest = parse_formatter_flags(reader.rest(), firehose_flags)
    activity.firehose_formatters = formatters
    return activity, rest


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


def get_firehose_activity_strings(
    firehose: FirehoseActivity,
    strings_data: Sequence[UUIDText],
    shared_strings: Sequence[SharedCacheStrings],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
) -> MessageData:
    """Resolve the base format string of an activity entry from dsc or UUID text files."""
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