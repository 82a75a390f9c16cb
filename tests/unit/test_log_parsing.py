"""Unit tests for engine log parsing."""

import pytest

from latexflow.contexts.rendering.log_parsing import parse_engine_log, read_engine_log

SAMPLE_LOG = r"""
This is LuaHBTeX, Version 1.17.0
(./thesis.tex
LaTeX Warning: Citation `knuth84' on page 1 undefined on input line 12.
Package hyperref Warning: Token not allowed in a PDF string on input line 20.
Overfull \hbox (12.3pt too wide) in paragraph at lines 30--31
./thesis.tex:42: Undefined control sequence.
l.42 \foo
! Emergency stop.
LaTeX Warning: Citation `knuth84' on page 1 undefined on input line 12.
"""


@pytest.mark.unit
def test_parse_engine_log_errors():
    errors, _ = parse_engine_log(SAMPLE_LOG)

    assert errors == ["./thesis.tex:42: Undefined control sequence.", "Emergency stop."]


@pytest.mark.unit
def test_parse_engine_log_warnings_deduplicated():
    _, warnings = parse_engine_log(SAMPLE_LOG)

    assert warnings == [
        "Citation `knuth84' on page 1 undefined on input line 12.",
        "Token not allowed in a PDF string on input line 20.",
        "12.3pt too wide",
    ]


@pytest.mark.unit
def test_classic_error_not_duplicated_by_file_line_form():
    log = "./a.tex:3: Missing $ inserted.\n! Missing $ inserted.\n"

    errors, _ = parse_engine_log(log)

    assert errors == ["./a.tex:3: Missing $ inserted."]


@pytest.mark.unit
def test_read_engine_log_missing_file(tmp_path):
    assert read_engine_log(tmp_path, "thesis") == ([], [])


@pytest.mark.unit
def test_read_engine_log_tolerates_invalid_utf8(tmp_path):
    (tmp_path / "thesis.log").write_bytes(b"Font \xe9t\xe9\n! Undefined control sequence.\n")

    errors, _ = read_engine_log(tmp_path, "thesis")

    assert errors == ["Undefined control sequence."]
