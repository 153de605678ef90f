"""Format strings for trace firehose entries."""

from __future__ import annotations

from collections.abc import Sequence

from .message import MessageData, extract_format_strings
from .reader import CatalogChunk, UUIDText


def get_firehose_trace_strings(
    strings_data: Sequence[UUIDText],
    string_offset: int,
    first_proc_id: int,
    second_proc_id: int,
    catalogs: CatalogChunk,
) -> MessageData:
    """Resolve the base format string of a trace entry from the main executable's UUID text file."""
    # Trace entries have only been seen with the main_exe flag.
    return extract_format_strings(
        strings_data, string_offset, first_proc_id, second_proc_id, catalogs, 0
    )