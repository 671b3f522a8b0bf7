# tests/test_utils.py
import re
from datetime import datetime, timedelta, timezone

import pytest

from filemeta.utils import file_extension, utc_timestamp


@pytest.mark.parametrize(
    "name, expected",
    [
        ("document.pdf", ".pdf"),
        ("report.final.pdf", ".pdf"),
        ("archive.tar.gz", ".gz"),
        ("photo.JPG", ".JPG"),
        ("README", None),
        ("", None),
        (".gitignore", None),
        ("..hidden", None),
        ("...", None),
        (".env.local", ".local"),
        ("trailing.", "."),
        ("some.dir/Makefile", None),
        ("some/dir/notes.txt", ".txt"),
    ],
)
def test_file_extension(name, expected):
    assert file_extension(name) == expected


def test_file_extension_is_stable_across_calls():
    assert {file_extension(".gitignore") for _ in range(5)} == {None}


def test_utc_timestamp_formats_milliseconds_with_z_suffix():
    moment = datetime(2024, 1, 15, 10, 35, 22, 156789, tzinfo=timezone.utc)
    assert utc_timestamp(moment) == "2024-01-15T10:35:22.156Z"


def test_utc_timestamp_converts_other_offsets_to_utc():
    cet = timezone(timedelta(hours=1))
    moment = datetime(2024, 1, 15, 11, 35, 22, 0, tzinfo=cet)
    assert utc_timestamp(moment) == "2024-01-15T10:35:22.000Z"


def test_utc_timestamp_defaults_to_now():
    stamp = utc_timestamp()
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", stamp)
