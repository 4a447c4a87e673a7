"""HuffTree CLI.

This is the stable CLI entrypoint (console-script: ``hufftree``).

Commands:
  - compress / decompress: lossless file round-trip
  - verify: dry-run decode of a compressed file (no output written)
  - codes: dump the code table stored in a compressed file header
  - options-validate: check an options spec (JSON)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from hufftree.core.tree import TIE_BREAKS, Code, derive_codes
from hufftree.engine.processor import ProcessStats
from hufftree.errors import EXIT_GENERIC, EXIT_USAGE, HuffTreeError
from hufftree.options import OptionsSpecError, OptionsSpecV1, load_options_spec

VERSION = "0.1.0"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def print_stats(
    original_path: Path, compressed_path: Path, stats: ProcessStats, label: str
) -> None:
    size_orig = original_path.stat().st_size
    size_comp = compressed_path.stat().st_size

    print(f"=== HuffTree stats ({label}) ===")
    print(f"File originale : {original_path} ({size_orig} byte)")
    print(f"File compresso : {compressed_path} ({size_comp} byte)")
    print(f"Header         : {stats.header_bits} bit (magic + albero)")

    if size_orig == 0:
        print("File originale vuoto: niente statistiche sensate 🙂")
        print("===============================")
        return

    ratio = size_comp / size_orig
    body_bits = stats.bits_written - stats.header_bits if label == "compress" else None
    print(f"Rapporto       : {ratio:.3f} (1.0 = nessuna compressione)")
    if body_bits is not None and stats.symbols:
        # sentinel code included: it is part of the body
        print(f"Bit/simbolo    : {body_bits / stats.symbols:.3f} (8.0 = non compresso)")
    print("===============================")


def _cmd_compress(
    input_path: Path,
    output_path: Path,
    *,
    tie_break: str | None,
    options_arg: str | None,
    quiet: bool,
) -> int:
    from hufftree.engine.processor import compress_file

    opts = load_options_spec(options_arg) if options_arg else OptionsSpecV1()
    # precedence: CLI --tie-break > spec.tie_break > default fifo
    tb = tie_break if tie_break is not None else opts.tie_break

    stats = compress_file(input_path, output_path, tie_break=tb)
    if opts.stats and not quiet:
        print_stats(input_path, output_path, stats, "compress")
    return 0


def _cmd_decompress(input_path: Path, output_path: Path, *, quiet: bool) -> int:
    from hufftree.engine.processor import decompress_file

    stats = decompress_file(input_path, output_path)
    if not quiet:
        print_stats(output_path, input_path, stats, "decompress")
    return 0


def _cmd_verify(input_path: Path, *, as_json: bool) -> int:
    from hufftree.verify import verify_compressed_file

    rep = verify_compressed_file(input_path)
    if as_json:
        print(json.dumps(rep.to_json(), ensure_ascii=False, sort_keys=True))
    else:
        print("OK")
    return 0


def _codes_to_json(codes: dict[int, Code]) -> dict[str, object]:
    rows = []
    for sym in sorted(codes):
        c = codes[sym]
        rows.append({"symbol": sym, "bits": c.bits(), "len": c.nbits})
    return {"schema": "hufftree.codes.v1", "n": len(rows), "codes": rows}


def _cmd_codes(input_path: Path) -> int:
    from hufftree.core.bitio import BitInputStream
    from hufftree.engine.processor import read_header, require_input_file

    with BitInputStream(require_input_file(input_path).open("rb")) as bit_in:
        tree = read_header(bit_in)
    print(json.dumps(_codes_to_json(derive_codes(tree)), ensure_ascii=False, indent=2))
    return 0


def _cmd_options_validate(options_arg: str) -> int:
    # load is the validation
    load_options_spec(options_arg)
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hufftree", description="HuffTree: tree-header Huffman compressor"
    )
    p.add_argument("--version", action="version", version=f"hufftree {VERSION}")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Lossless compress")
    p_c.add_argument("input", type=Path)
    p_c.add_argument("output", type=Path)
    p_c.add_argument(
        "--tie-break",
        default=None,
        choices=list(TIE_BREAKS),
        help="Merge order for equal weights (default: spec.tie_break or fifo)",
    )
    p_c.add_argument(
        "--options",
        default=None,
        help="Options spec (JSON). Use '@file.json' to load from file, or pass JSON inline.",
    )
    p_c.add_argument("--quiet", action="store_true", help="Do not print statistics")
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Lossless decompress")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    p_d.add_argument("--quiet", action="store_true", help="Do not print statistics")
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Verify a compressed file (full decode, no output)")
    p_v.add_argument("input", type=Path)
    p_v.add_argument("--json", action="store_true", help="Print a JSON report instead of OK")
    _add_common_args(p_v)

    p_k = sub.add_parser("codes", help="Print the code table stored in a compressed file")
    p_k.add_argument("input", type=Path)
    _add_common_args(p_k)

    p_o = sub.add_parser("options-validate", help="Validate an options spec (v1)")
    p_o.add_argument("options", help="Options spec JSON (@file.json or inline JSON)")
    _add_common_args(p_o)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "compress":
            return _cmd_compress(
                ns.input,
                ns.output,
                tie_break=ns.tie_break,
                options_arg=ns.options,
                quiet=bool(ns.quiet),
            )
        if ns.cmd == "decompress":
            return _cmd_decompress(ns.input, ns.output, quiet=bool(ns.quiet))
        if ns.cmd == "verify":
            return _cmd_verify(ns.input, as_json=bool(ns.json))
        if ns.cmd == "codes":
            return _cmd_codes(ns.input)
        if ns.cmd == "options-validate":
            return _cmd_options_validate(str(ns.options))
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except OptionsSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[hufftree] {e}", file=sys.stderr)
        return EXIT_USAGE
    except HuffTreeError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[hufftree] {type(e).__name__}: {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[hufftree] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
