"""Tests for shared helpers: id parsing, URL templates, password hashes, log masking."""

import logging

import pytest

from client.utils import ProgressPrinter, format_file_size
from client.upload_client import UploadProgress
from common.logging_config import SensitiveDataFilter
from common.passwords import hash_password, hashes_match
from server.utils import generate_file_id, generate_short_id, parse_ids, strip_uri_template


@pytest.mark.parametrize('raw,expected', [
    ('f_1', ['f_1']),
    ('f_1, f_2 ,f_3', ['f_1', 'f_2', 'f_3']),
    ('f_1,,f_2,', ['f_1', 'f_2']),
    ('f_2,f_1,f_2', ['f_2', 'f_1']),
    (' , ', []),
])
def test_parse_ids(raw, expected):
    assert parse_ids(raw) == expected


def test_strip_uri_template():
    url = 'https://uploads.github.com/repos/o/r/releases/1/assets{?name,label}'

    assert strip_uri_template(url) == 'https://uploads.github.com/repos/o/r/releases/1/assets'
    assert strip_uri_template('https://plain/url') == 'https://plain/url'


def test_generated_ids():
    file_id = generate_file_id()
    short_id = generate_short_id(6)

    assert file_id.startswith('f_') and len(file_id) == 14
    assert len(short_id) == 6 and short_id.isalnum()


def test_hash_password_is_sha256_hex():
    assert hash_password('abc') == 'ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad'


def test_hashes_match():
    stored = hash_password('secret')

    assert hashes_match(stored, stored)
    assert hashes_match(stored, stored.upper())
    assert not hashes_match(stored, hash_password('other'))
    assert not hashes_match(stored, None)
    assert not hashes_match(stored, '')


def test_sensitive_data_filter_masks_secrets():
    record = logging.LogRecord(
        'server', logging.INFO, __file__, 1,
        'GET /view?id=f_1&pwd=abcdef passwordHash=123abc token ghp_AAAAAAAAAAAAAAAAAAAA', None, None
    )

    SensitiveDataFilter().filter(record)

    assert 'abcdef' not in record.msg
    assert '123abc' not in record.msg
    assert 'AAAAAAAAAAAAAAAA' not in record.msg
    assert 'id=f_1' in record.msg


def test_format_file_size():
    assert format_file_size(512) == '512 B'
    assert format_file_size(1536) == '1.50 KiB'
    assert format_file_size(5 * 1024 * 1024) == '5.00 MiB'


def test_progress_printer(capsys):
    printer = ProgressPrinter('clip.mp4')

    printer(UploadProgress(stage='chunk', bytes_sent=512, total_bytes=1024, chunk_index=0, total_chunks=2))
    printer(UploadProgress(stage='finalize', bytes_sent=1024, total_bytes=1024))

    output = capsys.readouterr().out
    assert '50.0%' in output
    assert 'Finalizing clip.mp4' in output
