"""Tests for manifest path normalisation and existence checks."""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from media_sorter.paths import candidate_forms, locate, normalize_path, verify_paths


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/photos/a.jpg", "/photos/a.jpg"),
        ("file:///photos/a.jpg", "/photos/a.jpg"),
        ("FILE:///photos/a.jpg", "/photos/a.jpg"),
        ("file:///C:/Users/me/a.jpg", "C:/Users/me/a.jpg"),
        ("C:\\Users\\me\\a.jpg", "C:/Users/me/a.jpg"),
        ("/photos//nested///a.jpg", "/photos/nested/a.jpg"),
        ("/photos/my%20trip/a.jpg", "/photos/my trip/a.jpg"),
        ("/photos/a\x00.jpg", "/photos/a.jpg"),
        ("/photos/\ta\n.jpg\r", "/photos/a.jpg"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_invalid_percent_encoding_is_kept():
    # %ff is not valid UTF-8 on its own
    assert normalize_path("/photos/bad%ff.jpg") == "/photos/bad%ff.jpg"


def test_normalize_does_not_resolve_relative_segments():
    assert normalize_path("/photos/../other/a.jpg") == "/photos/../other/a.jpg"


def test_candidate_forms_cover_three_checks():
    forms = candidate_forms("some/dir/a.jpg")
    assert forms[0] == "some/dir/a.jpg"
    assert forms[1] == os.path.abspath("some/dir/a.jpg")
    assert forms[2] == "some/dir/a.jpg".replace("/", os.sep)


def test_locate_finds_relative_path(tmp_path, monkeypatch):
    (tmp_path / "a.jpg").write_bytes(b"x")
    monkeypatch.chdir(tmp_path)
    assert locate("a.jpg") == "a.jpg"
    assert locate("missing.jpg") is None


def test_verify_reports_missing_in_input_order(tmp_path):
    present = tmp_path / "here.jpg"
    present.write_bytes(b"x")
    raw = [str(present), "/x/missing.jpg", f"file://{present}", "/x/gone.png"]
    verified, missing = verify_paths(raw)
    assert [v.present for v in verified] == [True, False, True, False]
    assert missing == ["/x/missing.jpg", "/x/gone.png"]
    assert verified[2].target == str(present)
