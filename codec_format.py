"""
On-disk format for Huffman-compressed text.

    <symbol>:<count>|<symbol>:<count>|...|\\n<packed payload bits>

The header is UTF-8. The payload is the code bit string packed eight bits
per byte, most significant bit first, with the last byte zero-padded. No
length is stored: the counts in the header add up to the number of symbols
to decode, which is what lets the decoder ignore the padding.

The header is scanned pair by pair (one character, ':', digits, '|') rather
than split on the delimiters, so ':', '|' and digits work as symbols. A
newline symbol is always written as the first pair; anywhere else a newline
at the start of a pair ends the header.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import huffman as huff

HEADER_END = b"\n"
PAIR_SEP = b":"
PAIR_END = b"|"

Trace = Optional[Callable[[str], None]]


@dataclass
class CompressionStats:
    symbol_count: int
    unique_symbols: int
    header_bytes: int
    payload_bytes: int
    pad_bits: int
    input_bytes: int = 0
    output_bytes: int = 0

    @property
    def compression_ratio(self) -> float:
        return (self.header_bytes + self.payload_bytes) / max(1, self.input_bytes)


# Header

def _header_order(symbol: str) -> Tuple[bool, str]:
    # newline pair first, everything else by code point
    return (symbol != "\n", symbol)


def serialize_header(frequency_table: Dict[str, int]) -> bytes:
    parts = [f"{symbol}:{frequency_table[symbol]}|" for symbol in sorted(frequency_table, key=_header_order)]
    return "".join(parts).encode("utf-8") + HEADER_END


def _utf8_width(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _token(data: bytes, start: int, stop: int) -> str:
    return data[start:stop].decode("utf-8", errors="replace")


def parse_header(data: bytes) -> Tuple[Dict[str, int], int]:
    """
    Parse the frequency table at the start of data.
    Returns (frequency_table, payload_offset).
    """
    ft: Dict[str, int] = {}
    pos = 0
    n = len(data)

    while True:
        if pos >= n:
            raise huff.MalformedHeaderError("header is not terminated by a newline", _token(data, max(0, pos - 16), pos), pos)

        lead = data[pos]
        # a newline only opens a pair at offset 0, and only if ':' follows
        if lead == HEADER_END[0] and not (pos == 0 and data[1:2] == PAIR_SEP):
            return ft, pos + 1

        width = _utf8_width(lead)
        if width == 0:
            raise huff.MalformedHeaderError("invalid UTF-8 lead byte", _token(data, pos, pos + 1), pos)
        try:
            symbol = data[pos:pos + width].decode("utf-8")
        except UnicodeDecodeError:
            raise huff.MalformedHeaderError("invalid UTF-8 symbol", _token(data, pos, pos + width), pos) from None

        colon = pos + width
        if data[colon:colon + 1] != PAIR_SEP:
            raise huff.MalformedHeaderError("expected ':' after symbol", _token(data, pos, colon + 1), pos)

        digits_start = colon + 1
        end = digits_start
        while end < n and 0x30 <= data[end] <= 0x39:
            end += 1
        if end == digits_start:
            raise huff.MalformedHeaderError("missing count", _token(data, pos, end + 1), pos)
        if data[end:end + 1] != PAIR_END:
            raise huff.MalformedHeaderError("expected '|' after count", _token(data, pos, end + 1), pos)

        count = int(data[digits_start:end])
        if count == 0:
            raise huff.MalformedHeaderError("count must be positive", _token(data, pos, end + 1), pos)
        if symbol in ft:
            raise huff.MalformedHeaderError("duplicate symbol", _token(data, pos, end + 1), pos)

        ft[symbol] = count
        pos = end + 1


# Payload

def pack_bits(bits: str) -> Tuple[bytes, int]:
    """
    Pack a '0'/'1' string into bytes, MSB first.
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for ch in bits:
        acc = (acc << 1) | (1 if ch == '1' else 0)
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc & 0xFF)
            acc = 0
            acc_bits = 0

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        acc = acc << pad_bits
        out.append(acc & 0xFF)

    return bytes(out), pad_bits


def unpack_bits(packed: bytes) -> str:
    # padding bits included, the decoder stops on the symbol count
    return "".join(format(byte, "08b") for byte in packed)


# Whole-text pipeline

def compress_with_stats(text: str, trace: Trace = None) -> Tuple[bytes, CompressionStats]:
    ft = huff.build_frequency_table(text)
    header = serialize_header(ft)

    if not ft:
        stats = CompressionStats(0, 0, len(header), 0, 0, 0, len(header))
        return header, stats

    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    bits = huff.huffman_encode(text, code_map)
    payload, pad_bits = pack_bits(bits)

    if trace is not None:
        trace(f"{len(text)} symbols, {len(ft)} unique, {len(bits)} code bits, {pad_bits} padding bits")

    stats = CompressionStats(
        symbol_count=len(text),
        unique_symbols=len(ft),
        header_bytes=len(header),
        payload_bytes=len(payload),
        pad_bits=pad_bits,
        input_bytes=len(text.encode("utf-8")),
        output_bytes=len(header) + len(payload),
    )
    return header + payload, stats


def compress(text: str, trace: Trace = None) -> bytes:
    data, _ = compress_with_stats(text, trace=trace)
    return data


def decompress_with_stats(data: bytes, strict: bool = False, trace: Trace = None) -> Tuple[str, CompressionStats]:
    ft, offset = parse_header(data)
    payload = data[offset:]

    if not ft:
        if payload and trace is not None:
            trace(f"ignoring {len(payload)} payload bytes after an empty header")
        return "", CompressionStats(0, 0, offset, len(payload), 0, len(data), 0)

    symbol_count = sum(ft.values())
    root = huff.build_huffman_tree(ft)
    text = huff.huffman_decode(unpack_bits(payload), root, expected_length=symbol_count, strict=strict, trace=trace)

    code_map = huff.generate_huffman_codes(root)
    code_bits = sum(len(code_map[symbol]) * count for symbol, count in ft.items())

    stats = CompressionStats(
        symbol_count=len(text),
        unique_symbols=len(ft),
        header_bytes=offset,
        payload_bytes=len(payload),
        pad_bits=max(0, len(payload) * 8 - code_bits),
        input_bytes=len(data),
        output_bytes=len(text.encode("utf-8")),
    )
    return text, stats


def decompress(data: bytes, strict: bool = False, trace: Trace = None) -> str:
    text, _ = decompress_with_stats(data, strict=strict, trace=trace)
    return text


# Files

def compress_file(input_path, output_path, encoding: str = "utf-8", trace: Trace = None) -> CompressionStats:
    # newline="" keeps line endings byte-exact through the round trip
    with open(input_path, "r", encoding=encoding, newline="") as f:
        text = f.read()

    data, stats = compress_with_stats(text, trace=trace)
    stats.input_bytes = len(text.encode(encoding))

    with open(output_path, "wb") as f:
        f.write(data)
    return stats


def decompress_file(input_path, output_path, encoding: str = "utf-8", strict: bool = False, trace: Trace = None) -> CompressionStats:
    with open(input_path, "rb") as f:
        data = f.read()

    text, stats = decompress_with_stats(data, strict=strict, trace=trace)
    encoded = text.encode(encoding)
    stats.output_bytes = len(encoded)

    with open(output_path, "wb") as f:
        f.write(encoded)
    return stats
