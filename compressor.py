# Huffman text compressor, command-line driver
#
# How to run:
#   python compressor.py compress gatsby.txt gatsby.huf
#   python compressor.py decompress gatsby.huf gatsby.out.txt
#   python compressor.py codes gatsby.txt
#   python compressor.py --verbose --strict decompress gatsby.huf gatsby.out.txt

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import codec_format as fmt
import huffman as huff


def _trace_to_stderr(message: str) -> None:
    print(f"trace: {message}", file=sys.stderr)


def _display(symbol: str) -> str:
    # repr without the quotes, so '\n' and ' ' stay readable
    return repr(symbol)[1:-1] if symbol != " " else "' '"


def format_code_table(frequency_table, code_map) -> List[str]:
    """
    One line per symbol: symbol, count, code length, code.
    Sorted by code length, then symbol.
    """
    lines = []
    for symbol in sorted(code_map, key=lambda s: (len(code_map[s]), s)):
        code = code_map[symbol]
        lines.append(f"{_display(symbol):>6}  {frequency_table[symbol]:>8}  {len(code):>3}  {code or '-'}")
    return lines


def cmd_compress(args, trace) -> int:
    stats = fmt.compress_file(args.input, args.output, encoding=args.encoding, trace=trace)
    print(f"Compressed '{args.input}' -> '{args.output}'")
    print(
        f"{stats.symbol_count} symbols ({stats.unique_symbols} unique): "
        f"{stats.input_bytes} bytes -> {stats.output_bytes} bytes "
        f"(header {stats.header_bytes}, payload {stats.payload_bytes}, ratio {stats.compression_ratio:.3f})"
    )
    return 0


def cmd_decompress(args, trace) -> int:
    stats = fmt.decompress_file(args.input, args.output, encoding=args.encoding, strict=args.strict, trace=trace)
    print(f"Decompressed '{args.input}' -> '{args.output}'")
    print(f"{stats.symbol_count} symbols, {stats.output_bytes} bytes written")
    return 0


def cmd_codes(args, trace) -> int:
    with open(args.input, "r", encoding=args.encoding, newline="") as f:
        text = f.read()

    ft = huff.build_frequency_table(text)
    if not ft:
        print(f"'{args.input}' is empty, no codes")
        return 0

    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    code_bits = sum(len(code_map[s]) * c for s, c in ft.items())
    if trace is not None:
        trace(f"tree weight {root.weight}, {code_bits} code bits in total")

    print(f"{'symbol':>6}  {'count':>8}  {'len':>3}  code")
    for line in format_code_table(ft, code_map):
        print(line)
    print(f"{len(text)} symbols, {code_bits / len(text):.3f} bits per symbol on average")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman-text", description="Lossless Huffman compression for text files")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Text encoding of plain-text files")
    ap.add_argument("--strict", action="store_true", help="Fail on a truncated bit stream instead of keeping the partial text")
    ap.add_argument("--verbose", action="store_true", help="Print codec trace messages to stderr")

    sub = ap.add_subparsers(dest="mode", required=True)

    p = sub.add_parser("compress", help="Compress a text file")
    p.add_argument("input")
    p.add_argument("output")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Decompress a file written by 'compress'")
    p.add_argument("input")
    p.add_argument("output")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("codes", help="Print the Huffman code table of a text file")
    p.add_argument("input")
    p.set_defaults(func=cmd_codes)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    trace = _trace_to_stderr if args.verbose else None

    try:
        return args.func(args, trace)
    except (huff.HuffmanError, OSError, UnicodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
