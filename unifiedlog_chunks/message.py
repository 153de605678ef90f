"""Resolve a log entry's base format string, library and process paths."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .reader import (
    CatalogChunk,
    ParseError,
    RangeDescriptor,
    SharedCacheStrings,
    UUIDDescriptor,
    UUIDText,
    UUIDTextEntry,
    extract_string,
)

logger = logging.getLogger(__name__)

# If this bit of the original offset is set the formatter is "dynamic" ("%s").
DYNAMIC_OFFSET_FLAG = 0x80000000
_ZERO_UUID = "0" * 32
_U32_MASK = 0xFFFFFFFF


@dataclass
class MessageData:
    """The base format string of a log entry and the images it came from."""

    library: str = ""
    format_string: str = ""
    process: str = ""
    library_uuid: str = ""
    process_uuid: str = ""


def get_catalog_dsc(
    catalogs: CatalogChunk, first_proc_id: int, second_proc_id: int
) -> tuple[str, str]:
    """Return ``(dsc_uuid, main_uuid)`` of the catalog entry for the process ids.

    Both are empty strings when no entry matches.
    """
    for process_info in catalogs.catalog_process_info_entries:
        if (
            process_info.first_number_proc_id == first_proc_id
            and process_info.second_number_proc_id == second_proc_id
        ):
            return process_info.dsc_uuid, process_info.main_uuid
    return "", ""


def uuidtext_image_path(data: bytes, entries: Sequence[UUIDTextEntry]) -> str:
    """Return the image path stored after all string ranges of a UUID text footer."""
    offset = sum(entry.entry_size for entry in entries)
    if offset > len(data):
        raise ParseError(
            f"image path offset {offset} is beyond footer of {len(data)} bytes"
        )
    return extract_string(data[offset:])


def get_uuid_image_path(main_uuid: str, entries: Sequence[UUIDText]) -> str:
    """Return the image path of the UUID text file that ``main_uuid`` names."""
    for data in entries:
        if main_uuid.endswith(data.uuid):
            return uuidtext_image_path(data.footer_data, data.entry_descriptors)
    if main_uuid == _ZERO_UUID:
        logger.info("Got UUID of all zeros from Catalog")
        return ""
    logger.warning("Failed to get path string from UUIDText file for entry: %s", main_uuid)
    return f"Failed to get path string from UUIDText file for entry: {main_uuid}"


def _range_image(shared_string: SharedCacheStrings, ranges: RangeDescriptor) -> UUIDDescriptor:
    try:
        return shared_string.uuids[ranges.unknown_uuid_index]
    except IndexError:
        raise ParseError(
            f"shared cache uuid index {ranges.unknown_uuid_index} out of range"
        ) from None


def _shared_result(
    shared_string: SharedCacheStrings,
    ranges: RangeDescriptor,
    format_string: str,
    main_uuid: str,
    strings_data: Sequence[UUIDText],
) -> MessageData:
    image = _range_image(shared_string, ranges)
    return MessageData(
        library=image.path_string,
        library_uuid=image.uuid,
        format_string=format_string,
        process_uuid=main_uuid,
        process=get_uuid_image_path(main_uuid, strings_data),
    )


def extract_shared_strings(
    shared_strings: Sequence[SharedCacheStrings],
    strings_data: Sequence[UUIDText],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
    original_offset: int,
) -> MessageData:
    """Look up the format string in the shared cache strings (dsc) of the process."""
    logger.debug("Extracting format string from shared cache file (dsc)")
    dsc_uuid, main_uuid = get_catalog_dsc(catalogs, first_proc_id, second_proc_id)
    matching = [s for s in shared_strings if s.dsc_uuid == dsc_uuid]

    if original_offset & DYNAMIC_OFFSET_FLAG:
        for shared_string in matching:
            if shared_string.ranges:
                return _shared_result(
                    shared_string, shared_string.ranges[0], "%s", main_uuid, strings_data
                )

    for shared_string in matching:
        logger.debug("Associated dsc file with log entry: %s", dsc_uuid)
        for ranges in shared_string.ranges:
            if not (
                ranges.range_offset
                <= string_offset
                < ranges.range_offset + ranges.range_size
            ):
                continue
            offset = string_offset - ranges.range_offset
            # An offset at the very end means the string lives in the next range.
            if offset == len(ranges.strings):
                continue
            if offset > len(ranges.strings):
                raise ParseError(
                    f"string offset {offset} is beyond range of {len(ranges.strings)} bytes"
                )
            message = extract_string(ranges.strings[offset:])
            return _shared_result(shared_string, ranges, message, main_uuid, strings_data)

    for shared_string in matching:
        if shared_string.ranges:
            return _shared_result(
                shared_string,
                shared_string.ranges[0],
                "Error: Invalid shared string offset",
                main_uuid,
                strings_data,
            )

    logger.warning("Failed to get message string from Shared Strings DSC file")
    return MessageData(format_string="Unknown shared string message")


def extract_format_strings(
    strings_data: Sequence[UUIDText],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
    original_offset: int,
) -> MessageData:
    """Look up the format string in the main executable's UUID text file."""
    logger.debug("Extracting format string from UUID file")
    _, main_uuid = get_catalog_dsc(catalogs, first_proc_id, second_proc_id)
    message_data = MessageData(library_uuid=main_uuid, process_uuid=main_uuid)
    matching = [d for d in strings_data if main_uuid.endswith(d.uuid)]

    if original_offset & DYNAMIC_OFFSET_FLAG:
        for data in matching:
            path = uuidtext_image_path(data.footer_data, data.entry_descriptors)
            message_data.process = message_data.library = path
            message_data.format_string = "%s"
            return message_data

    wanted = string_offset & _U32_MASK
    for data in matching:
        footer = data.footer_data
        string_start = 0
        for entry in data.entry_descriptors:
            if entry.range_start_offset > wanted:
                string_start += entry.entry_size
                continue
            offset = wanted - entry.range_start_offset
            if len(footer) < offset + string_start or offset > entry.entry_size:
                string_start += entry.entry_size
                continue
            message = extract_string(footer[offset + string_start :])
            path = uuidtext_image_path(footer, data.entry_descriptors)
            message_data.format_string = message
            message_data.process = message_data.library = path
            return message_data

    for data in matching:
        path = uuidtext_image_path(data.footer_data, data.entry_descriptors)
        message_data.process = message_data.library = path
        message_data.format_string = (
            f"Error: Invalid offset {string_offset} for UUID {main_uuid}"
        )
        return message_data

    logger.warning("Failed to get message string from UUIDText file: %s", main_uuid)
    message_data.format_string = (
        f"Failed to get string message from UUIDText file: {main_uuid}"
    )
    return message_data