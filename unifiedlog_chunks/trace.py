"""Trace firehose entries, whose message values are stored back to front."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .reader import ByteReader, ParseError

logger = logging.getLogger(__name__)

_MINIMUM_MESSAGE_SIZE = 4


@dataclass
class TraceItem:
    """One value of a trace message."""

    message_strings: str = ""
    item_type: int = 0
    item_size: int = 0


@dataclass
class TraceMessage:
    """The values carried by a trace entry."""

    item_info: list[TraceItem] = field(default_factory=list)
    backtrace_strings: list[str] = field(default_factory=list)


@dataclass
class FirehoseTrace:
    """A parsed trace firehose entry."""

    unknown_pc_id: int = 0
    message_data: TraceMessage = field(default_factory=TraceMessage)


def parse_firehose_trace(data: bytes) -> tuple[FirehoseTrace, bytes]:
    """Parse a trace firehose entry, returning it and the bytes that follow.

    The whole entry is consumed, so the remainder is always empty.
    """
    reader = ByteReader(data)
    trace = FirehoseTrace(unknown_pc_id=reader.u32())

    # Only entries with at least four more bytes carry message values.
    if reader.remaining < _MINIMUM_MESSAGE_SIZE:
        reader.rest()
        return trace, b""

    # Values are stored back to front: value, size, count.
    trace.message_data = get_message(reader.rest()[::-1])
    return trace, b""


def get_message(data: bytes) -> TraceMessage:
    """Parse a reversed trace message, giving an empty message if it is malformed."""
    try:
        message, _ = parse_trace_message(data)
    except ParseError as err:
        logger.error("Could not get Trace message data: %s", err)
        return TraceMessage()
    return message


def parse_trace_message(data: bytes) -> tuple[TraceMessage, bytes]:
    """Parse reversed trace message data, returning the message and the bytes left over."""
    message = TraceMessage()
    if len(data) < _MINIMUM_MESSAGE_SIZE:
        return message, bytes(data)

    reader = ByteReader(data)
    entries = reader.u8()
    sizes = [reader.u8() for _ in range(entries)]

    for size in sizes:
        chunk = reader.read(size)
        # The data was reversed, so numbers read as big-endian.
        if size in (1, 2, 4, 8):
            value = int.from_bytes(chunk, "big")
        else:
            logger.warning(
                "Unhandled size of trace data: %d. Defaulting to size of one", size
            )
            value = ByteReader(chunk).u8()
        message.item_info.append(TraceItem(message_strings=str(value)))

    message.item_info.reverse()
    return message, reader.rest()