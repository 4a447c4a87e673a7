from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.p1

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def _run_cli(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run hufftree CLI through a python -c wrapper.

    This avoids assuming the console-script entrypoint is installed.
    """
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
    )
    cmd = [
        sys.executable,
        "-c",
        "from hufftree.cli import main; raise SystemExit(main())",
        *args,
    ]
    return subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=env,
        text=True,
        capture_output=True,
    )


def test_cli_roundtrip_verify_and_stats(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.huf"
    back = tmp_path / "back.txt"

    data = "HELLO 123\nRIGA ARTICOLO: vite M3 qty=10 prezzo=1.20\n" * 10
    inp.write_text(data, encoding="utf-8")

    r = _run_cli("compress", str(inp), str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "Rapporto" in r.stdout

    r = _run_cli("verify", str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "OK" in r.stdout

    r = _run_cli("verify", str(out), "--json")
    assert r.returncode == 0, (r.stdout, r.stderr)
    rep = json.loads(r.stdout)
    assert rep["ok"] is True
    assert rep["symbols"] == len(data.encode("utf-8"))

    r = _run_cli("decompress", str(out), str(back), "--quiet")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout == ""
    assert back.read_text(encoding="utf-8") == data


def test_cli_options_spec_and_tie_break_flag(tmp_path: Path) -> None:
    inp = tmp_path / "in.bin"
    out1 = tmp_path / "a.huf"
    out2 = tmp_path / "b.huf"
    inp.write_bytes(b"\x00\x01\x02\x02" * 50)

    spec = json.dumps({"spec": "hufftree.options.v1", "tie_break": "symbol", "stats": False})
    r = _run_cli("options-validate", spec)
    assert r.returncode == 0, (r.stdout, r.stderr)

    r = _run_cli("compress", str(inp), str(out1), "--options", spec)
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout == ""

    r = _run_cli("compress", str(inp), str(out2), "--tie-break", "symbol", "--quiet")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert out1.read_bytes() == out2.read_bytes()


def test_cli_codes_dump(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.huf"
    inp.write_bytes(b"abc")
    assert _run_cli("compress", str(inp), str(out), "--quiet").returncode == 0

    r = _run_cli("codes", str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    obj = json.loads(r.stdout)
    assert obj["n"] == 4
    assert {row["symbol"]: row["bits"] for row in obj["codes"]} == {
        97: "00",
        98: "01",
        99: "10",
        256: "11",
    }


def test_cli_bad_magic_exit_12(tmp_path: Path) -> None:
    inp = tmp_path / "plain.txt"
    inp.write_text("not a compressed file\n", encoding="utf-8")
    r = _run_cli("decompress", str(inp), str(tmp_path / "back.txt"))
    assert r.returncode == 12
    assert "[hufftree]" in r.stderr
    assert "BadMagicNumberError" in r.stderr


def test_cli_truncated_body_exit_14(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.huf"
    inp.write_bytes(b"FATTURA 1001 TOTALE 12.00\n" * 40)
    assert _run_cli("compress", str(inp), str(out), "--quiet").returncode == 0
    out.write_bytes(out.read_bytes()[:-3])

    r = _run_cli("verify", str(out))
    assert r.returncode == 14
    assert "phase=body" in r.stderr


def test_cli_missing_input_exit_2(tmp_path: Path) -> None:
    missing = tmp_path / "missing.txt"
    for cmd in (
        ("compress", str(missing), str(tmp_path / "out.huf")),
        ("decompress", str(missing), str(tmp_path / "back.txt")),
        ("verify", str(missing)),
        ("codes", str(missing)),
    ):
        r = _run_cli(*cmd)
        assert r.returncode == 2, (cmd, r.stderr)
        assert "UsageError" in r.stderr
    assert not (tmp_path / "out.huf").exists()


def test_cli_options_validate_rejects_bad_json_exit_2() -> None:
    r = _run_cli("options-validate", "{}")
    assert r.returncode == 2
    assert "[hufftree]" in r.stderr


def test_cli_version() -> None:
    r = _run_cli("--version")
    assert r.returncode == 0
    assert "hufftree" in r.stdout
