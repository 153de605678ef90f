"""Loss firehose entries: a count of log messages that were dropped."""

from __future__ import annotations

from dataclasses import dataclass

from .reader import ByteReader


@dataclass
class FirehoseLoss:
    """A span of time in which ``count`` log entries were lost."""

    start_time: int = 0
    end_time: int = 0
    count: int = 0


def parse_firehose_loss(data: bytes) -> tuple[FirehoseLoss, bytes]:
    """Parse a loss firehose entry, returning it and the bytes that follow."""
    reader = ByteReader(data)
    loss = FirehoseLoss(start_time=reader.u64(), end_time=reader.u64(), count=reader.u64())
    return loss, reader.rest()