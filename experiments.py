"""
Huffman text codec experiments

Runs repeated compress/decompress cycles over synthetic text corpora and
records compression ratio, header overhead and timing per stage.

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_kb 2048
  python experiments.py --outdir results --exp1_generators english_like,zipf_letters,unicode_mixed

Notes:
  Sizes are in symbols (characters), not encoded bytes. The header is
  counted in every compressed size, so tiny inputs can come out larger
  than the original.
"""

from __future__ import annotations

import argparse
import csv
import random
import statistics
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib.pyplot as plt

import codec_format as fmt
import huffman as huff


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def _sample_cdf(rng: random.Random, alphabet: str, weights: List[float], size: int) -> str:
    cdf = []
    acc = 0.0
    total = sum(weights)
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(alphabet[lo])
    return "".join(out)


# Synthetic corpus generators

PRINTABLE = string.ascii_letters + string.digits + string.punctuation + " \n"

def gen_uniform(size: int, alphabet: str = PRINTABLE, seed: int = 0) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: str = "a", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = [ch for ch in PRINTABLE if ch != dominant]
    return "".join(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: str = string.ascii_lowercase, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(len(alphabet))]
    return _sample_cdf(rng, alphabet, weights, size)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        ".,'\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in ".,'\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample_cdf(rng, chars, weights, size)

def gen_unicode_mixed(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    alphabet = "aeiou stnrl" + "éüßñ" + "αβγδ" + "你好世界" + "🙂🚀"
    weights = [8.0] * 11 + [2.0] * 4 + [1.0] * 4 + [0.5] * 4 + [0.2] * 2
    return _sample_cdf(rng, alphabet, weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform_printable": lambda size, seed: gen_uniform(size, seed=seed),
    "uniform_lower": lambda size, seed: gen_uniform(size, alphabet=string.ascii_lowercase, seed=seed),
    "zipf_letters": lambda size, seed: gen_zipf_like(size, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "unicode_mixed": lambda size, seed: gen_unicode_mixed(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, str]:
    """
    Unknown generator names fall back to uniform_printable so one typo
    does not sink a long run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform_printable", gen_uniform(size, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    text_symbols: int
    run_id: int
    unique_symbols: int

    frequency_ms: float
    build_tree_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    original_bytes: int
    header_bytes: int
    payload_bytes: int
    pad_bits: int
    compression_ratio: float
    bits_per_symbol: float

    correctness_ok: int  # 1 or 0


def run_one(text: str) -> MetricRow:
    # Frequency analysis
    t0 = now_ns()
    ft = huff.build_frequency_table(text)
    t1 = now_ns()

    # Tree + code table
    if ft:
        root = huff.build_huffman_tree(ft)
        code_map = huff.generate_huffman_codes(root)
    else:
        code_map = {}
    t2 = now_ns()

    # Encode: code bits, packing, header
    bits = huff.huffman_encode(text, code_map)
    payload, pad_bits = fmt.pack_bits(bits)
    header = fmt.serialize_header(ft)
    t3 = now_ns()

    # Decode through the full file format
    decoded = fmt.decompress(header + payload)
    t4 = now_ns()

    frequency_ms = ns_to_ms(t1 - t0)
    build_tree_ms = ns_to_ms(t2 - t1)
    encode_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t4 - t3)
    original_bytes = len(text.encode("utf-8"))

    return MetricRow(
        exp_name="",
        dataset_name="",
        text_symbols=len(text),
        run_id=0,
        unique_symbols=len(ft),
        frequency_ms=frequency_ms,
        build_tree_ms=build_tree_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=frequency_ms + build_tree_ms + encode_ms + decode_ms,
        original_bytes=original_bytes,
        header_bytes=len(header),
        payload_bytes=len(payload),
        pad_bits=pad_bits,
        compression_ratio=(len(header) + len(payload)) / max(1, original_bytes),
        bits_per_symbol=len(bits) / max(1, len(text)),
        correctness_ok=1 if decoded == text else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


SUMMARY_METRICS = ("compression_ratio", "bits_per_symbol", "encode_ms", "decode_ms", "build_tree_ms", "total_ms")

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, text_symbols and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.text_symbols)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "text_symbols", "n_runs", "header_bytes"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "text_symbols": size,
                "n_runs": len(items),
                "header_bytes": statistics.mean(x.header_bytes for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.bar(x, [mean_for(d, "compression_ratio") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()

    plt.figure()
    plt.bar(x, [mean_for(d, "bits_per_symbol") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Code Bits per Symbol")
    plt.title("Experiment 1: Average Code Length by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_bits_per_symbol.png", dpi=200)
    plt.close()

    plt.figure()
    for field, label in (("encode_ms", "encode"), ("decode_ms", "decode")):
        plt.plot(x, [mean_for(d, field) for d in datasets], marker="o", label=label)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Experiment 1: Encode/Decode Time by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_codec_time.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.text_symbols for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.text_symbols == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for field, label in (("encode_ms", "encode"), ("decode_ms", "decode"), ("build_tree_ms", "build tree")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xlabel("Text Size (symbols)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Stage Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_stage_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        plt.plot(sizes, [mean_size(s, "compression_ratio") for s in sizes], marker="o")
        plt.xscale("log", base=2)
        plt.xlabel("Text Size (symbols)")
        plt.ylabel("Compressed Bytes / Original Bytes")
        plt.title(f"Experiment 2: Compression Ratio vs Size ({dist})")
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_compression_ratio_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=128, help="Experiment 1 fixed text size in K symbols")
    ap.add_argument("--exp1_generators", type=str, default="uniform_printable,zipf_letters,repetitive90,english_like,unicode_mixed",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min size in K symbols (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=1024, help="Experiment 2 max size in K symbols (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="english_like,zipf_letters",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, text = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(text)
                row.exp_name = "exp1_distribution"
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        min_size = max(1, args.exp2_min_kb) * 1024
        max_size = max(1, args.exp2_max_kb) * 1024

        sizes: List[int] = []
        s = min_size
        while s <= max_size:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, text = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id)
                    row = run_one(text)
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0 if ok_rate == 1.0 or not rows else 1


if __name__ == "__main__":
    raise SystemExit(main())
