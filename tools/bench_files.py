#!/usr/bin/env python3
"""File benchmark tool.

Runs compress -> verify -> decompress -> diff on every file under a directory,
collecting timing and sizes. zlib and zstd (if installed) sizes are reported
as baselines next to the HuffTree size.

Usage example:
  python tools/bench_files.py /path/in --iters 3 --tie-break fifo

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- Output rows are JSON lines on stdout; the last line is a summary.
"""

from __future__ import annotations

import argparse
import json
import time
import zlib
from pathlib import Path
from typing import Any

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None


def _baselines(data: bytes, *, zstd_level: int) -> dict[str, int | None]:
    out: dict[str, int | None] = {"zlib9": len(zlib.compress(data, 9)), "zstd": None}
    if zstd is not None:
        out["zstd"] = len(zstd.ZstdCompressor(level=int(zstd_level)).compress(data))
    return out


def bench_file(path: Path, *, tie_break: str, iters: int, zstd_level: int = 19) -> dict[str, Any]:
    from hufftree.engine.processor import compress_bytes, decompress_bytes
    from hufftree.verify import verify_compressed_bytes

    data = path.read_bytes()
    t_comp = t_verify = t_decomp = 0.0
    blob = b""
    back = b""
    for _ in range(max(1, int(iters))):
        t0 = time.perf_counter()
        blob = compress_bytes(data, tie_break=tie_break)
        t_comp += time.perf_counter() - t0

        t1 = time.perf_counter()
        verify_compressed_bytes(blob)
        t_verify += time.perf_counter() - t1

        t2 = time.perf_counter()
        back = decompress_bytes(blob)
        t_decomp += time.perf_counter() - t2

    n = max(1, int(iters))
    return {
        "file": str(path),
        "size": len(data),
        "hufftree": len(blob),
        "ratio": (len(blob) / len(data)) if data else None,
        "baselines": _baselines(data, zstd_level=zstd_level),
        "times_sec": {
            "compress": t_comp / n,
            "verify": t_verify / n,
            "decompress": t_decomp / n,
        },
        "roundtrip_ok": back == data,
    }


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench_files.py", description="HuffTree file benchmark")
    ap.add_argument("input_dir", type=Path)
    ap.add_argument("--iters", type=int, default=1)
    ap.add_argument("--tie-break", default="fifo", choices=["fifo", "symbol"])
    ap.add_argument("--zstd-level", type=int, default=19)
    ns = ap.parse_args(argv)

    inp = ns.input_dir.resolve()
    if not inp.is_dir():
        raise SystemExit(f"input_dir non valido: {inp}")

    rows: list[dict[str, Any]] = []
    t0_all = time.perf_counter()
    for p in sorted(x for x in inp.rglob("*") if x.is_file()):
        row = bench_file(p, tie_break=ns.tie_break, iters=ns.iters, zstd_level=ns.zstd_level)
        rows.append(row)
        print(json.dumps(row, ensure_ascii=False))
        if not row["roundtrip_ok"]:
            raise SystemExit(f"diff mismatch: roundtrip non lossless ({p})")

    total_in = sum(r["size"] for r in rows)
    total_out = sum(r["hufftree"] for r in rows)
    summary = {
        "schema": "hufftree.bench_files.v1",
        "files": len(rows),
        "bytes_in": total_in,
        "bytes_out": total_out,
        "ratio": (total_out / total_in) if total_in else None,
        "zstd_available": zstd is not None,
        "wall_total_sec": time.perf_counter() - t0_all,
    }
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
