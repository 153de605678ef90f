# unifiedlog_chunks

Pure-Python parsers for the firehose entries found inside Apple unified log
`tracev3` files. It covers activity, non-activity, signpost, trace and loss
entries, along with the formatter flags that say where an entry's base format
string is stored. It also resolves those format strings against UUIDText and
shared cache (dsc) string data that you have already parsed.

The package has no runtime dependencies.

## Installation

```
pip install .
```

## Parsing entries

Each parser takes `bytes`. It returns a tuple: the parsed record first, then the
bytes that follow it. If the data is truncated or holds an unknown formatter
flag, the parser raises `unifiedlog_chunks.reader.ParseError`, which is a
subclass of `ValueError`.

```python
from unifiedlog_chunks.loss import parse_firehose_loss
from unifiedlog_chunks.activity import parse_activity
from unifiedlog_chunks.nonactivity import parse_non_activity
from unifiedlog_chunks.signpost import parse_signpost
from unifiedlog_chunks.trace import parse_firehose_trace
from unifiedlog_chunks.flags import parse_formatter_flags

loss, rest = parse_firehose_loss(loss_bytes)
print(loss.start_time, loss.end_time, loss.count)

entry, rest = parse_non_activity(data, flags)
print(entry.subsystem_value, entry.unknown_pc_id)
print(entry.firehose_formatters.shared_cache, entry.firehose_formatters.uuid_relative)

activity, rest = parse_activity(data, flags, log_type)   # log_type 0x3 = useraction
signpost, rest = parse_signpost(data, flags)
formatters, rest = parse_formatter_flags(data, flags)
```

### Trace entries

A trace entry stores its values back to front. `parse_firehose_trace` reads the
leading pc id. If at least four bytes follow it, those bytes are reversed and
decoded into a `TraceMessage` of `TraceItem` values, and the whole entry is
consumed.

You can also decode reversed message data directly:

- `parse_trace_message(data)` returns `(message, rest)`, and raises
  `ParseError` if the data is truncated.
- `get_message(data)` returns an empty `TraceMessage` instead of raising.

```python
from unifiedlog_chunks.trace import parse_firehose_trace

trace, _ = parse_firehose_trace(bytes([248, 145, 3, 0, 200, 0, 0, 0, 0, 0, 0, 0, 8, 1]))
print(trace.unknown_pc_id, [item.message_strings for item in trace.message_data.item_info])
```

## Resolving format strings

To resolve a format string you describe your lookup data with the dataclasses
in `unifiedlog_chunks.reader`:

- `UUIDText`, made of `UUIDTextEntry` records and `footer_data`;
- `SharedCacheStrings`, made of `RangeDescriptor` and `UUIDDescriptor` records;
- `CatalogChunk`, made of `ProcessInfo` records with `UUIDInfo` load ranges.

For each entry type there is a helper that returns a
`unifiedlog_chunks.message.MessageData`. It holds `format_string`, `library`,
`library_uuid`, `process` and `process_uuid`.

| Entry type   | Helper                                                        |
|--------------|---------------------------------------------------------------|
| Activity     | `activity.get_firehose_activity_strings`                      |
| Non-activity | `nonactivity.get_firehose_nonactivity_strings`                |
| Signpost     | `signpost.get_firehose_signpost`                              |
| Trace        | `trace_strings.get_firehose_trace_strings`                    |

```python
from unifiedlog_chunks.nonactivity import get_firehose_nonactivity_strings

message = get_firehose_nonactivity_strings(
    entry, uuidtext_files, shared_strings, string_offset,
    first_proc_id, second_proc_id, catalog,
)
print(message.format_string, message.process, message.library)
```

The helpers choose a lookup from the entry's formatter flags:

- shared cache, or large shared cache;
- absolute;
- UUID-relative;
- main executable.

These lookups are also available directly:

- `message.extract_shared_strings` and `message.extract_format_strings`;
- `uuid_strings.extract_absolute_strings` and
  `uuid_strings.extract_alt_uuid_strings`;
- `message.get_catalog_dsc`, `message.get_uuid_image_path` and
  `message.uuidtext_image_path`.

If the offset has bit `0x80000000` set, the format string is reported as `"%s"`.
If an offset or UUID file cannot be matched, `format_string` carries a message
that starts with `Error:`, `Failed to get` or `Unknown`, rather than raising.

`reader.ByteReader` is the little-endian reader used by the parsers. The
`reader` module also provides `extract_string`, which decodes a NUL-terminated
string, and `format_uuid`, which renders upper-case hex.

## What this package does not do

- It does not open or walk `tracev3` files or log archives, and it does not
  split a file into chunks.
- It does not parse catalog, UUIDText or shared cache files from disk. You
  build the `reader` dataclasses yourself.
- Only the firehose entry types listed above are parsed. Other chunk types are
  not handled.
- It does not substitute argument values into format strings, and it has no
  command-line tool.

## Running the tests

```
pip install .[test]
pytest
```