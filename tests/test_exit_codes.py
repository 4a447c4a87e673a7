from __future__ import annotations

from pathlib import Path

import pytest

from hufftree.errors import (
    EXIT_CODES,
    BadMagicNumberError,
    CorruptBodyError,
    CorruptHeaderError,
    HuffTreeError,
    IoError,
    UsageError,
    exit_code_info,
    render_exit_codes_markdown,
)


def test_exit_codes_are_unique() -> None:
    codes = [e.code for e in EXIT_CODES]
    names = [e.name for e in EXIT_CODES]
    assert len(set(codes)) == len(codes)
    assert len(set(names)) == len(names)


@pytest.mark.parametrize(
    "exc, name",
    [
        (HuffTreeError, "GENERIC"),
        (UsageError, "USAGE"),
        (IoError, "IO_ERROR"),
        (BadMagicNumberError, "BAD_MAGIC"),
        (CorruptHeaderError, "CORRUPT_HEADER"),
        (CorruptBodyError, "CORRUPT_BODY"),
    ],
)
def test_exception_exit_codes(exc: type[HuffTreeError], name: str) -> None:
    info = exit_code_info(exc.exit_code)
    assert info is not None
    assert info.name == name


def test_phase_in_message() -> None:
    e = CorruptBodyError("body troncato", phase="body")
    assert str(e) == "body troncato (phase=body)"
    assert str(CorruptBodyError("x")) == "x"


def test_docs_exit_codes_in_sync() -> None:
    doc = Path(__file__).resolve().parents[1] / "docs" / "exit_codes.md"
    assert doc.read_text(encoding="utf-8") == render_exit_codes_markdown()
