import pytest

from unifiedlog_chunks.message import (
    MessageData,
    extract_format_strings,
    extract_shared_strings,
    get_catalog_dsc,
    get_uuid_image_path,
    uuidtext_image_path,
)
from unifiedlog_chunks.reader import (
    CatalogChunk,
    ParseError,
    ProcessInfo,
    RangeDescriptor,
    SharedCacheStrings,
    UUIDDescriptor,
    UUIDText,
    UUIDTextEntry,
)

MAIN_UUID = "6C3ADF991F033C1C96C4ADFAA12D8CED"
DSC_UUID = "80896B329EB13A10A7C5449B15305DE2"
PROCESS_PATH = "/usr/libexec/lightsoutmanagementd"
BLOCKS_UUID = "4DF6D8F5D9C23A968DE45E99D6B73DC8"
BLOCKS_PATH = "/usr/lib/system/libsystem_blocks.dylib"
LOM_UUID = "D8E5AF1CAF4F3CEB8731E6F240E8EA7D"
LOM_PATH = "/System/Library/PrivateFrameworks/AppleLOM.framework/Versions/A/AppleLOM"


@pytest.fixture
def catalog():
    return CatalogChunk(
        catalog_process_info_entries=[
            ProcessInfo(
                first_number_proc_id=1,
                second_number_proc_id=2,
                main_uuid="11111111111111111111111111111111",
                dsc_uuid="22222222222222222222222222222222",
            ),
            ProcessInfo(
                first_number_proc_id=45,
                second_number_proc_id=188,
                main_uuid=MAIN_UUID,
                dsc_uuid=DSC_UUID,
            ),
        ]
    )


@pytest.fixture
def strings():
    formats = b"hello\x00LOMD Start\x00"
    return [
        UUIDText(
            uuid=MAIN_UUID[2:],
            entry_descriptors=[
                UUIDTextEntry(range_start_offset=14950, entry_size=len(formats))
            ],
            footer_data=formats + PROCESS_PATH.encode() + b"\x00",
        )
    ]


@pytest.fixture
def shared():
    first = b"abc\x00%@ start\x00"
    second = b"next one\x00"
    return [
        SharedCacheStrings(
            dsc_uuid=DSC_UUID,
            ranges=[
                RangeDescriptor(
                    range_offset=1000,
                    range_size=len(first) + 1,
                    unknown_uuid_index=0,
                    strings=first,
                ),
                RangeDescriptor(
                    range_offset=1013,
                    range_size=len(second),
                    unknown_uuid_index=1,
                    strings=second,
                ),
            ],
            uuids=[
                UUIDDescriptor(uuid=BLOCKS_UUID, path_string=BLOCKS_PATH),
                UUIDDescriptor(uuid=LOM_UUID, path_string=LOM_PATH),
            ],
        )
    ]


def test_get_catalog_dsc(catalog):
    assert get_catalog_dsc(catalog, 45, 188) == (DSC_UUID, MAIN_UUID)


def test_get_catalog_dsc_missing(catalog):
    assert get_catalog_dsc(catalog, 45, 189) == ("", "")


def test_get_uuid_image_path(strings):
    assert get_uuid_image_path(MAIN_UUID, strings) == PROCESS_PATH


def test_get_uuid_image_path_zero_uuid(strings):
    assert get_uuid_image_path("0" * 32, strings) == ""


def test_get_uuid_image_path_unknown(strings):
    assert get_uuid_image_path("ABCDEF", strings) == (
        "Failed to get path string from UUIDText file for entry: ABCDEF"
    )


def test_uuidtext_image_path():
    entries = [UUIDTextEntry(entry_size=2), UUIDTextEntry(entry_size=3)]
    assert uuidtext_image_path(b"a\x00bb\x00/bin/x\x00", entries) == "/bin/x"


def test_uuidtext_image_path_truncated():
    with pytest.raises(ParseError):
        uuidtext_image_path(b"ab", [UUIDTextEntry(entry_size=10)])


def test_extract_shared_strings(shared, strings, catalog):
    result = extract_shared_strings(shared, strings, 1004, 45, 188, catalog, 0)
    assert result == MessageData(
        library=BLOCKS_PATH,
        format_string="%@ start",
        process=PROCESS_PATH,
        library_uuid=BLOCKS_UUID,
        process_uuid=MAIN_UUID,
    )


def test_extract_shared_strings_end_of_range_uses_next(shared, strings, catalog):
    result = extract_shared_strings(shared, strings, 1013, 45, 188, catalog, 0)
    assert result.format_string == "next one"
    assert result.library == LOM_PATH
    assert result.library_uuid == LOM_UUID


def test_extract_shared_strings_bad_offset(shared, strings, catalog):
    result = extract_shared_strings(shared, strings, 7, 45, 188, catalog, 0)
    assert result.library == BLOCKS_PATH
    assert result.library_uuid == BLOCKS_UUID
    assert result.process == PROCESS_PATH
    assert result.process_uuid == MAIN_UUID
    assert result.format_string == "Error: Invalid shared string offset"


def test_extract_shared_strings_dynamic(shared, strings, catalog):
    offset = 2420246585
    result = extract_shared_strings(shared, strings, offset, 45, 188, catalog, offset)
    assert result.library == BLOCKS_PATH
    assert result.process == PROCESS_PATH
    assert result.format_string == "%s"


def test_extract_shared_strings_no_dsc(shared, strings, catalog):
    result = extract_shared_strings(shared, strings, 1004, 1, 2, catalog, 0)
    assert result == MessageData(format_string="Unknown shared string message")


def test_extract_format_strings(strings, catalog):
    result = extract_format_strings(strings, 14956, 45, 188, catalog, 14956)
    assert result == MessageData(
        library=PROCESS_PATH,
        format_string="LOMD Start",
        process=PROCESS_PATH,
        library_uuid=MAIN_UUID,
        process_uuid=MAIN_UUID,
    )


def test_extract_format_strings_bad_offset(strings, catalog):
    result = extract_format_strings(strings, 1, 45, 188, catalog, 0)
    assert result.process == PROCESS_PATH
    assert result.format_string == f"Error: Invalid offset 1 for UUID {MAIN_UUID}"


def test_extract_format_strings_dynamic(strings, catalog):
    offset = 2147519968
    result = extract_format_strings(strings, offset, 45, 188, catalog, offset)
    assert result.process == PROCESS_PATH
    assert result.library == PROCESS_PATH
    assert result.library_uuid == MAIN_UUID
    assert result.format_string == "%s"


def test_extract_format_strings_unknown_uuid(strings, catalog):
    uuid = "11111111111111111111111111111111"
    result = extract_format_strings(strings, 14956, 1, 2, catalog, 0)
    assert result.process == ""
    assert result.format_string == (
        f"Failed to get string message from UUIDText file: {uuid}"
    )