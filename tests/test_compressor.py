import pytest

import compressor


def _write(path, text):
    path.write_bytes(text.encode("utf-8"))
    return str(path)


def test_compress_then_decompress(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "abracadabra\nabracadabra\n")
    packed = str(tmp_path / "in.huf")
    out = str(tmp_path / "out.txt")

    assert compressor.main(["compress", src, packed]) == 0
    assert "Compressed" in capsys.readouterr().out

    assert compressor.main(["decompress", packed, out]) == 0
    assert "24 symbols" in capsys.readouterr().out
    assert (tmp_path / "out.txt").read_bytes() == (tmp_path / "in.txt").read_bytes()


def test_codes_table(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "abracadabra")
    assert compressor.main(["codes", src]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert ["a", "5", "1", "0"] in [line.split() for line in lines]
    assert ["c", "1", "3", "100"] in [line.split() for line in lines]


def test_codes_single_symbol(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "zzz")
    assert compressor.main(["codes", src]) == 0
    assert ["z", "3", "0", "-"] in [line.split() for line in capsys.readouterr().out.splitlines()]


def test_codes_empty_file(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "")
    assert compressor.main(["codes", src]) == 0
    assert "no codes" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    [],
    ["explode", "a", "b"],
    ["compress", "only-one"],
    ["decompress", "a", "b", "c"],
])
def test_usage_errors(argv, tmp_path):
    with pytest.raises(SystemExit) as info:
        compressor.main(argv)
    assert info.value.code == 2
    assert list(tmp_path.iterdir()) == []


def test_missing_input_file(tmp_path, capsys):
    code = compressor.main(["compress", str(tmp_path / "missing.txt"), str(tmp_path / "out.huf")])
    assert code == 1
    assert capsys.readouterr().err.startswith("error:")


def test_malformed_compressed_file(tmp_path, capsys):
    bad = tmp_path / "bad.huf"
    bad.write_bytes(b"a:5|b:x|\n\x00")
    code = compressor.main(["decompress", str(bad), str(tmp_path / "out.txt")])
    assert code == 1
    assert "b:x" in capsys.readouterr().err


def test_strict_truncated_stream(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "abracadabra")
    packed = tmp_path / "in.huf"
    compressor.main(["compress", src, str(packed)])
    packed.write_bytes(packed.read_bytes()[:-1])
    capsys.readouterr()

    assert compressor.main(["decompress", str(packed), str(tmp_path / "lenient.txt")]) == 0
    assert (tmp_path / "lenient.txt").read_text(encoding="utf-8") == "abracada"

    assert compressor.main(["--strict", "decompress", str(packed), str(tmp_path / "strict.txt")]) == 1
    assert "error:" in capsys.readouterr().err


def test_verbose_traces_to_stderr(tmp_path, capsys):
    src = _write(tmp_path / "in.txt", "abracadabra")
    packed = str(tmp_path / "in.huf")
    assert compressor.main(["--verbose", "compress", src, packed]) == 0
    captured = capsys.readouterr()
    assert "trace: 11 symbols, 5 unique, 23 code bits, 1 padding bits" in captured.err
    assert "trace:" not in captured.out
