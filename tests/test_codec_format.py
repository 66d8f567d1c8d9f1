import pytest

import codec_format as fmt
import huffman as huff


def test_serialize_header_sorted():
    assert fmt.serialize_header({"b": 2, "a": 5}) == b"a:5|b:2|\n"


def test_header_round_trip_any_key_order():
    for table in ({"a": 5, "b": 2}, {"b": 2, "a": 5}):
        data = fmt.serialize_header(table) + b"\x00\xff"
        parsed, offset = fmt.parse_header(data)
        assert parsed == {"a": 5, "b": 2}
        assert data[offset:] == b"\x00\xff"


def test_empty_header():
    assert fmt.serialize_header({}) == b"\n"
    assert fmt.parse_header(b"\n") == ({}, 1)


def test_header_with_delimiter_digit_and_newline_symbols():
    table = {"\n": 2, ":": 3, "|": 3, "1": 1, "2": 1, "é": 4, "🙂": 1}
    data = fmt.serialize_header(table)
    assert data.startswith(b"\n:2|")
    parsed, offset = fmt.parse_header(data + b"\n\n")
    assert parsed == table
    assert offset == len(data)


@pytest.mark.parametrize("data", [
    b"a:5|b:2|",          # no terminator
    b"a5|\n",             # missing ':'
    b"a:|\n",             # missing count
    b"a:x|\n",            # non-numeric count
    b"a:5b:2|\n",         # missing '|'
    b"a:0|\n",            # zero count
    b"a:1|a:2|\n",        # duplicate
    b"||\n",              # empty pair
    b"\xff:1|\n",         # not UTF-8
])
def test_malformed_headers(data):
    with pytest.raises(huff.MalformedHeaderError):
        fmt.parse_header(data)


def test_malformed_header_reports_token():
    with pytest.raises(huff.MalformedHeaderError) as info:
        fmt.parse_header(b"a:5|b:x|\n")
    assert info.value.offset == 4
    assert info.value.token.startswith("b:")


def test_pack_bits_msb_first():
    assert fmt.pack_bits("1") == (b"\x80", 7)
    assert fmt.pack_bits("00000001") == (b"\x01", 0)
    assert fmt.pack_bits("") == (b"", 0)
    assert fmt.unpack_bits(b"\x80\x01") == "1000000000000001"


def test_compress_abracadabra_layout():
    data = fmt.compress("abracadabra")
    assert data.startswith(b"a:5|b:2|c:1|d:1|r:2|\n")
    # 23 code bits -> 3 payload bytes
    assert len(data) == len(b"a:5|b:2|c:1|d:1|r:2|\n") + 3
    assert fmt.decompress(data) == "abracadabra"


@pytest.mark.parametrize("text", [
    "abracadabra",
    "a",
    "aaaa",
    "ab",
    "line one\nline two\r\nline three\n",
    "1:|\n2||::\n",
    "日本語のテキスト🙂🙂",
])
def test_round_trip(text):
    assert fmt.decompress(fmt.compress(text)) == text


def test_single_symbol_file_has_empty_payload():
    data = fmt.compress("aaaa")
    assert data == b"a:4|\n"
    assert fmt.decompress(data) == "aaaa"


def test_empty_text_skips_tree_builder(monkeypatch):
    def fail(_):
        raise AssertionError("tree builder called for empty text")

    monkeypatch.setattr(huff, "build_huffman_tree", fail)
    data = fmt.compress("")
    assert data == b"\n"
    assert fmt.decompress(data) == ""


def test_truncated_payload_best_effort_and_strict():
    data = fmt.compress("abracadabra")
    messages = []
    assert fmt.decompress(data[:-1], trace=messages.append) == "abracada"
    assert messages
    with pytest.raises(huff.TruncatedStreamError):
        fmt.decompress(data[:-1], strict=True)


def test_compress_stats():
    _, stats = fmt.compress_with_stats("abracadabra")
    assert stats.symbol_count == 11
    assert stats.unique_symbols == 5
    assert stats.header_bytes == 21
    assert stats.payload_bytes == 3
    assert stats.pad_bits == 1
    assert stats.output_bytes == 24


def test_decompress_stats_pad_bits():
    _, stats = fmt.decompress_with_stats(fmt.compress("abracadabra"))
    assert stats.symbol_count == 11
    assert stats.pad_bits == 1


def test_file_round_trip(tmp_path):
    src = tmp_path / "in.txt"
    packed = tmp_path / "out.huf"
    restored = tmp_path / "back.txt"
    original = "Gatsby believed in the green light,\r\nthe orgastic future 🙂\n"
    src.write_bytes(original.encode("utf-8"))

    stats = fmt.compress_file(src, packed)
    assert stats.input_bytes == len(original.encode("utf-8"))
    assert packed.stat().st_size == stats.output_bytes

    fmt.decompress_file(packed, restored)
    assert restored.read_bytes() == src.read_bytes()


def test_file_round_trip_other_encoding(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes("café crème".encode("latin-1"))
    fmt.compress_file(src, tmp_path / "x.huf", encoding="latin-1")
    fmt.decompress_file(tmp_path / "x.huf", tmp_path / "back.txt", encoding="latin-1")
    assert (tmp_path / "back.txt").read_bytes() == src.read_bytes()


def test_missing_input_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        fmt.compress_file(tmp_path / "nope.txt", tmp_path / "out.huf")
