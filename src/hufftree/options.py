"""Options spec (v1) for HuffTree.

Goal: make compression runs reproducible (CLI, benches, CI) without new flags.

This module intentionally stays *small* and strict:
  - JSON only ('@file.json' or inline)
  - explicit schema id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hufftree.core.tree import TIE_BREAK_FIFO, TIE_BREAKS

SPEC_ID_V1 = "hufftree.options.v1"


class OptionsSpecError(ValueError):
    pass


def _load_json_arg(options_arg: str) -> dict[str, Any]:
    s = options_arg.strip()
    if not s:
        raise OptionsSpecError("options: argomento vuoto")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.is_file():
            raise OptionsSpecError(f"options: file non trovato: {p}")
        raw = p.read_text(encoding="utf-8")
        where = f"in {p}"
    else:
        raw = s
        where = "inline"

    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise OptionsSpecError(f"options: JSON non valido ({where}): {e}") from e
    if not isinstance(obj, dict):
        raise OptionsSpecError(f"options: il JSON ({where}) deve essere un oggetto")
    return obj


@dataclass(frozen=True)
class OptionsSpecV1:
    tie_break: str = TIE_BREAK_FIFO
    stats: bool = True


def load_options_spec(options_arg: str) -> OptionsSpecV1:
    """Load and validate an options spec.

    options_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(options_arg)

    allowed = {"spec", "tie_break", "stats"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise OptionsSpecError(f"options: chiavi non supportate: {', '.join(extra)}")

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise OptionsSpecError(
            f"options: spec non supportata: {spec_id!r} (attesa {SPEC_ID_V1!r})"
        )

    tie_break = obj.get("tie_break", TIE_BREAK_FIFO)
    if not isinstance(tie_break, str) or tie_break.strip() not in TIE_BREAKS:
        raise OptionsSpecError(
            f"options: 'tie_break' deve essere uno tra {', '.join(TIE_BREAKS)}"
        )

    stats = obj.get("stats", True)
    if not isinstance(stats, bool):
        raise OptionsSpecError("options: campo 'stats' deve essere booleano")

    return OptionsSpecV1(tie_break=tie_break.strip(), stats=stats)
