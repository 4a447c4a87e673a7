"""Typed errors for HuffTree.

Single source of truth for exit codes lives here.

Policy:
- One exception class per failure kind (I/O, magic, header, body).
- Every error is fatal for the current compress/decompress call: no retry, no rollback.
- The processor tags errors with the phase that was running (``phase``).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_IO = 11
EXIT_BAD_MAGIC = 12
EXIT_CORRUPT_HEADER = 13
EXIT_CORRUPT_BODY = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid options spec)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(EXIT_IO, "IO_ERROR", "Underlying stream failure (other than a clean end of stream)"),
    ExitCodeInfo(EXIT_BAD_MAGIC, "BAD_MAGIC", "Missing or wrong magic number (not a HuffTree file)"),
    ExitCodeInfo(EXIT_CORRUPT_HEADER, "CORRUPT_HEADER", "Tree header truncated or malformed"),
    ExitCodeInfo(EXIT_CORRUPT_BODY, "CORRUPT_BODY", "Body ended before the PSEUDO_EOF code"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE — do not edit manually.\n")
    lines.append("> Source of truth: `src/hufftree/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Internal errors extend `HuffTreeError` and carry an `exit_code` and a `phase`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- A failed `decompress` keeps the bytes already written to the output (no rollback).\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class HuffTreeError(Exception):
    """Base error for HuffTree."""

    exit_code: int = EXIT_GENERIC

    def __init__(self, message: str = "", *, phase: str | None = None) -> None:
        super().__init__(message)
        self.phase = phase

    def __str__(self) -> str:
        msg = super().__str__()
        if self.phase:
            return f"{msg} (phase={self.phase})"
        return msg


class UsageError(HuffTreeError):
    exit_code = EXIT_USAGE


class IoError(HuffTreeError):
    exit_code = EXIT_IO


class BadMagicNumberError(HuffTreeError):
    exit_code = EXIT_BAD_MAGIC


class CorruptHeaderError(HuffTreeError):
    exit_code = EXIT_CORRUPT_HEADER


class CorruptBodyError(HuffTreeError):
    exit_code = EXIT_CORRUPT_BODY
