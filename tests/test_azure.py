import io

import pytest

from stowage import azure
from stowage.azure import (
    MAX_CHUNK_SIZE,
    MAX_PARTS,
    START_CHUNK_SIZE,
    MultipartUploadTooBigError,
    clean_etag,
    determine_chunk_size,
    encoded_block_id,
    iter_blocks,
    parse_item_url,
    parse_metadata,
    prep_metadata,
    validate_config,
)
from stowage.errors import StowError


def test_chunk_size_small():
    assert determine_chunk_size(10) == START_CHUNK_SIZE


def test_chunk_size_scales_up():
    assert determine_chunk_size(MAX_PARTS * START_CHUNK_SIZE + 1) == START_CHUNK_SIZE * 2


def test_chunk_size_maximum():
    assert determine_chunk_size(MAX_PARTS * MAX_CHUNK_SIZE) == MAX_CHUNK_SIZE


def test_chunk_size_too_big():
    with pytest.raises(MultipartUploadTooBigError):
        determine_chunk_size(MAX_PARTS * MAX_CHUNK_SIZE + 1)


def test_too_big_is_stow_error():
    with pytest.raises(StowError, match="size exceeds maximum capacity"):
        determine_chunk_size(MAX_PARTS * MAX_CHUNK_SIZE + 1)


def test_encode_block_id():
    assert encoded_block_id(10) == "CgAAAAAAAAA="
    assert encoded_block_id(600) == "WAIAAAAAAAA="


ETAG_VALUE = "9c51403a2255f766891a1382288dece4"


@pytest.mark.parametrize(
    "pattern",
    [
        '"%s"',
        r'W/\"%s\"',
        'W/"%s"',
        r'"\"%s"\"',
        '""%s""',
        '"W/"%s""',
        r'"W/\"%s\""',
    ],
)
def test_etag_cleanup(pattern):
    assert clean_etag(pattern % ETAG_VALUE) == ETAG_VALUE


def test_etag_plain_unchanged():
    assert clean_etag(ETAG_VALUE) == ETAG_VALUE


def test_prep_metadata_success():
    expected = {"one": "two", "3": "4", "ninety-nine": "100"}
    assert prep_metadata(dict(expected)) == expected


def test_prep_metadata_failure_with_non_string_values():
    with pytest.raises(StowError, match="must be of type string"):
        prep_metadata({"float": 8.9, "number": 9})


def test_prep_metadata_none_is_empty():
    assert prep_metadata(None) == {}


def test_parse_metadata_round_trip():
    original = {"one": "two", "3": "4"}
    assert parse_metadata(prep_metadata(original)) == original


def test_validate_config_accepts_complete():
    config = {"account": "myaccount", "key": "placeholder"}
    validate_config(config)
    assert config["account"] == "myaccount"


def test_validate_config_missing_account():
    with pytest.raises(StowError, match="missing account id"):
        validate_config({"key": "placeholder"})


def test_validate_config_missing_key():
    with pytest.raises(StowError, match="missing auth key"):
        validate_config({"account": "myaccount"})


def test_iter_blocks_single_chunk():
    data = b"0123456789"
    blocks = list(iter_blocks(io.BytesIO(data), len(data)))
    assert blocks == [(encoded_block_id(0), data)]


def test_iter_blocks_empty_stream():
    assert list(iter_blocks(io.BytesIO(b""), 0)) == []


def test_iter_blocks_many_chunks_round_trip():
    data = bytes(range(256)) * (9 * 1024 * 4)
    blocks = list(iter_blocks(io.BytesIO(data), len(data)))
    assert [block_id for block_id, _ in blocks] == [encoded_block_id(n) for n in range(3)]
    assert all(len(chunk) <= START_CHUNK_SIZE for _, chunk in blocks)
    assert b"".join(chunk for _, chunk in blocks) == data


def test_iter_blocks_too_big_raises_eagerly():
    with pytest.raises(MultipartUploadTooBigError):
        iter_blocks(io.BytesIO(b""), MAX_PARTS * MAX_CHUNK_SIZE + 1)


def test_parse_item_url():
    url = "azure://myaccount.blob.core.windows.net/box/dir/file.txt"
    assert parse_item_url(url, "myaccount") == ("box", "dir/file.txt")


def test_parse_item_url_wrong_scheme():
    with pytest.raises(StowError, match="not valid azure URL"):
        parse_item_url("https://myaccount.blob.core.windows.net/box/a", "myaccount")


def test_parse_item_url_wrong_account():
    with pytest.raises(StowError, match="wrong azure URL"):
        parse_item_url("azure://other.blob.core.windows.net/box/a", "myaccount")


def test_parse_item_url_wrong_path():
    with pytest.raises(StowError, match="wrong path"):
        parse_item_url("azure://myaccount.blob.core.windows.net/box", "myaccount")


def test_blob_name_replaces_spaces():
    assert azure.blob_name("a b c") == "a+b+c"


def test_is_azure_url():
    assert azure.is_azure_url("azure://myaccount.blob.core.windows.net/x/y") is True
    assert azure.is_azure_url("file:///tmp/x") is False