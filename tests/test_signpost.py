import pytest

from unifiedlog_chunks.flags import FirehoseFormatters
from unifiedlog_chunks.reader import (
    CatalogChunk,
    ParseError,
    ProcessInfo,
    RangeDescriptor,
    SharedCacheStrings,
    UUIDDescriptor,
    UUIDInfo,
    UUIDText,
    UUIDTextEntry,
)
from unifiedlog_chunks.signpost import (
    FirehoseSignpost,
    get_firehose_signpost,
    parse_signpost,
)

MAIN = "AAAA"
LIB = "BBBB"
DSC = "CCCC"
CACHE_IMAGE = "DDDD"


def _catalog():
    return CatalogChunk(
        catalog_process_info_entries=[
            ProcessInfo(
                first_number_proc_id=1,
                second_number_proc_id=2,
                main_uuid=MAIN,
                dsc_uuid=DSC,
                uuid_info_entries=[
                    UUIDInfo(uuid=LIB, load_address=0x100000000, size=0x100)
                ],
            )
        ]
    )


def _strings():
    return [
        UUIDText(uuid=MAIN, entry_descriptors=[], footer_data=b"/usr/bin/proc\x00"),
        UUIDText(
            uuid=LIB,
            entry_descriptors=[UUIDTextEntry(range_start_offset=0, entry_size=6)],
            footer_data=b"hello\x00/lib/x\x00",
        ),
    ]


def _shared(range_offset):
    return [
        SharedCacheStrings(
            dsc_uuid=DSC,
            ranges=[
                RangeDescriptor(
                    range_offset=range_offset,
                    range_size=0x100,
                    unknown_uuid_index=0,
                    strings=b"\x01" * 16 + b"signpost %d\x00",
                )
            ],
            uuids=[UUIDDescriptor(uuid=CACHE_IMAGE, path_string="/lib/cache")],
        )
    ]


def test_parse_signpost():
    test_data = bytes(
        [225, 244, 2, 0, 1, 0, 238, 238, 178, 178, 181, 176, 238, 238, 176, 63, 27, 0, 0, 0]
    )
    results, _ = parse_signpost(test_data, 33282)
    assert results.unknown_pc_id == 193761
    assert results.unknown_activity_id == 0
    assert results.unknown_sentinel == 0
    assert results.subsystem == 1
    assert results.signpost_id == 17216892719917625070
    assert results.signpost_name == 1785776
    assert results.ttl_value == 0
    assert results.data_ref_value == 0

    formatters = results.firehose_formatters
    assert formatters.main_exe is True
    assert formatters.shared_cache is False
    assert formatters.has_large_offset == 0
    assert formatters.large_shared_cache == 0
    assert formatters.absolute is False
    assert formatters.uuid_relative == ""
    assert formatters.main_plugin is False
    assert formatters.pc_style is False
    assert formatters.main_exe_alt_index == 0


def test_parse_signpost_remainder():
    test_data = bytes(
        [225, 244, 2, 0, 1, 0, 238, 238, 178, 178, 181, 176, 238, 238, 176, 63, 27, 0, 0, 0]
    )
    _, rest = parse_signpost(test_data, 33282)
    assert rest == b"\x00\x00"


def test_parse_signpost_skips_value_after_name_with_large_shared_cache():
    # flags: has_name | large_shared_cache (0xc)
    data = (
        (7).to_bytes(4, "little")
        + (4).to_bytes(2, "little")
        + (9).to_bytes(8, "little")
        + (5).to_bytes(4, "little")
        + (4).to_bytes(2, "little")
        + b"\xaa"
    )
    results, rest = parse_signpost(data, 0x800C)
    assert results.unknown_pc_id == 7
    assert results.firehose_formatters.large_shared_cache == 4
    assert results.signpost_id == 9
    assert results.signpost_name == 5
    assert rest == b"\xaa"


def test_parse_signpost_unknown_formatter_flag():
    with pytest.raises(ParseError):
        parse_signpost(bytes(20), 0)


def test_parse_signpost_truncated():
    with pytest.raises(ParseError):
        parse_signpost(bytes([1, 2, 3, 4, 1, 0]), 0x202)


def test_get_signpost_shared_cache_large_offset():
    firehose = FirehoseSignpost(
        firehose_formatters=FirehoseFormatters(shared_cache=True, has_large_offset=1)
    )
    result = get_firehose_signpost(
        firehose, _strings(), _shared(0x80000000), 0x10, 1, 2, _catalog()
    )
    assert result.format_string == "signpost %d"
    assert result.library == "/lib/cache"
    assert result.library_uuid == CACHE_IMAGE
    assert result.process == "/usr/bin/proc"
    assert result.process_uuid == MAIN


def test_get_signpost_shared_cache_plain_offset():
    firehose = FirehoseSignpost(firehose_formatters=FirehoseFormatters(shared_cache=True))
    result = get_firehose_signpost(firehose, _strings(), _shared(0), 0x10, 1, 2, _catalog())
    assert result.format_string == "signpost %d"
    assert result.library == "/lib/cache"


def test_get_signpost_mismatched_large_shared_cache():
    firehose = FirehoseSignpost(
        firehose_formatters=FirehoseFormatters(has_large_offset=1, large_shared_cache=4)
    )
    result = get_firehose_signpost(
        firehose, _strings(), _shared(0x200000000), 0x10, 1, 2, _catalog()
    )
    assert result.format_string == "signpost %d"


def test_get_signpost_offset_overflow():
    firehose = FirehoseSignpost(
        firehose_formatters=FirehoseFormatters(shared_cache=True, has_large_offset=1)
    )
    with pytest.raises(ParseError):
        get_firehose_signpost(
            firehose, _strings(), _shared(0), 0xFFFFFFFFFFFFFFFF, 1, 2, _catalog()
        )


def test_get_signpost_absolute():
    firehose = FirehoseSignpost(
        unknown_pc_id=0x10,
        firehose_formatters=FirehoseFormatters(absolute=True, main_exe_alt_index=1),
    )
    result = get_firehose_signpost(firehose, _strings(), [], 0, 1, 2, _catalog())
    assert result.format_string == "hello"
    assert result.library == "/lib/x"
    assert result.library_uuid == LIB
    assert result.process == "/usr/bin/proc"


def test_get_signpost_uuid_relative():
    firehose = FirehoseSignpost(firehose_formatters=FirehoseFormatters(uuid_relative=LIB))
    result = get_firehose_signpost(firehose, _strings(), [], 0, 1, 2, _catalog())
    assert result.format_string == "hello"
    assert result.library == "/lib/x"
    assert result.library_uuid == LIB
    assert result.process_uuid == MAIN


def test_get_signpost_main_exe_missing_uuid_file():
    firehose = FirehoseSignpost(firehose_formatters=FirehoseFormatters(main_exe=True))
    result = get_firehose_signpost(firehose, [], [], 0, 1, 2, _catalog())
    assert result.format_string == f"Failed to get string message from UUIDText file: {MAIN}"