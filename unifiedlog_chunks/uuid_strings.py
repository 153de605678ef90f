"""Format strings for entries whose UUID text file is given by address or in the entry."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .message import (
    DYNAMIC_OFFSET_FLAG,
    MessageData,
    get_catalog_dsc,
    get_uuid_image_path,
    uuidtext_image_path,
)
from .reader import CatalogChunk, ParseError, UUIDText, extract_string

logger = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF


def _absolute_uuid(
    catalogs: CatalogChunk, absolute_offset: int, first_proc_id: int, second_proc_id: int
) -> str:
    """Find the image whose load range holds ``absolute_offset`` for the given process."""
    for process_info in catalogs.catalog_process_info_entries:
        if (
            process_info.first_number_proc_id != first_proc_id
            or process_info.second_number_proc_id != second_proc_id
        ):
            continue
        for info in process_info.uuid_info_entries:
            if info.load_address <= absolute_offset <= info.load_address + info.size:
                logger.debug("Absolute uuid file is: %s", info.uuid)
                return info.uuid
    return ""


def extract_absolute_strings(
    strings_data: Sequence[UUIDText],
    absolute_offset: int,
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
    original_offset: int,
) -> MessageData:
    """Look up the format string for an entry with the absolute flag set.

    The library's UUID text file is the image whose load range in the catalog
    contains ``absolute_offset``.
    """
    logger.debug("Extracting format string from UUID file for log entry with Absolute flag")
    library_uuid = _absolute_uuid(catalogs, absolute_offset, first_proc_id, second_proc_id)
    _, main_uuid = get_catalog_dsc(catalogs, first_proc_id, second_proc_id)
    message_data = MessageData(library_uuid=library_uuid, process_uuid=main_uuid)
    matching = [d for d in strings_data if library_uuid.endswith(d.uuid)]

    if original_offset & DYNAMIC_OFFSET_FLAG or string_offset == absolute_offset:
        for data in matching:
            message_data.library = uuidtext_image_path(data.footer_data, data.entry_descriptors)
            message_data.process = get_uuid_image_path(main_uuid, strings_data)
            message_data.format_string = "%s"
            return message_data

    for data in matching:
        footer = data.footer_data
        string_start = 0
        for entry in data.entry_descriptors:
            if entry.range_start_offset > string_offset:
                string_start += entry.entry_size
                continue
            offset = string_offset - entry.range_start_offset
            if len(footer) < offset + string_start or offset > entry.entry_size:
                string_start += entry.entry_size
                continue
            message_data.format_string = extract_string(footer[offset + string_start :])
            message_data.library = uuidtext_image_path(footer, data.entry_descriptors)
            message_data.process = get_uuid_image_path(main_uuid, strings_data)
            return message_data

    for data in matching:
        message_data.library = uuidtext_image_path(data.footer_data, data.entry_descriptors)
        message_data.format_string = (
            f"Error: Invalid offset {string_offset} for absolute UUID {library_uuid}"
        )
        message_data.process = get_uuid_image_path(main_uuid, strings_data)
        return message_data

    logger.warning(
        "Failed to get message string from absolute UUIDText file: %s", library_uuid
    )
    message_data.format_string = (
        f"Failed to get string message from absolute UUIDText file: {library_uuid}"
    )
    return message_data


def extract_alt_uuid_strings(
    strings_data: Sequence[UUIDText],
    string_offset: int,
    uuid: str,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
    original_offset: int,
) -> MessageData:
    """Look up the format string in the UUID text file named inside the log entry."""
    logger.debug("Extracting format string from alt uuid")
    _, main_uuid = get_catalog_dsc(catalogs, first_proc_id, second_proc_id)
    message_data = MessageData(library_uuid=uuid, process_uuid=main_uuid)
    matching = [d for d in strings_data if uuid.endswith(d.uuid)]

    if original_offset & DYNAMIC_OFFSET_FLAG:
        for data in matching:
            message_data.library = uuidtext_image_path(data.footer_data, data.entry_descriptors)
            message_data.process = get_uuid_image_path(main_uuid, strings_data)
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
            if len(footer) < offset or offset > entry.entry_size:
                string_start += entry.entry_size
                continue
            start = offset + string_start
            if start > len(footer):
                raise ParseError(
                    f"string offset {start} is beyond footer of {len(footer)} bytes"
                )
            message = extract_string(footer[start:])
            library = uuidtext_image_path(footer, data.entry_descriptors)
            message_data.process = get_uuid_image_path(main_uuid, strings_data)
            message_data.format_string = message
            message_data.library = library
            return message_data

    for data in matching:
        message_data.library = uuidtext_image_path(data.footer_data, data.entry_descriptors)
        message_data.format_string = (
            f"Error: Invalid offset {string_offset} for alternative UUID {uuid}"
        )
        message_data.process = get_uuid_image_path(main_uuid, strings_data)
        return message_data

    logger.warning(
        "Failed to get message string from alternative UUIDText file: %s", uuid
    )
    message_data.format_string = (
        f"Failed to get string message from alternative UUIDText file: {uuid}"
    )
    return message_data