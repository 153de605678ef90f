"""Parsers for Apple unified log firehose entries and resolution of their base format strings."""

__version__ = "0.1.0"