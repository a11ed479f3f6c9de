from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from statistics import mean, pstdev

ALPHAS = [0.0, 0.5, 0.9]


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.4f} ± {sd:.4f}"


def _label(alpha: float) -> str:
    return f"ALPHA={alpha:g}"


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    import numpy as np

    from backpropnets.core.config import TrainingConfig
    from backpropnets.core.network import Network
    from backpropnets.data import get_dataset
    from backpropnets.training.trainer import OnlineTrainer

    ap = argparse.ArgumentParser()
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--steps", type=int, default=2000)
    ap.add_argument("--eta", type=float, default=0.15)
    ap.add_argument("--window", type=int, default=100)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    dataset = get_dataset("xor")
    runs = []
    for alpha in ALPHAS:
        for s in args.seeds:
            network = Network(
                [dataset.d_in, 4, dataset.d_out],
                TrainingConfig(eta=args.eta, alpha=alpha),
                rng=np.random.default_rng(s),
            )
            errors = []
            trainer = OnlineTrainer(network, callbacks=[lambda _, m: errors.append(m["error"])])
            trainer.run(dataset.stream(s + 1), args.steps)
            window = max(1, min(args.window, len(errors)))
            runs.append(
                {
                    "alpha": alpha,
                    "seed": s,
                    "first_error": mean(errors[:window]),
                    "final_error": mean(errors[-window:]),
                }
            )
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    agg = {}
    for alpha in ALPHAS:
        finals = [r["final_error"] for r in runs if r["alpha"] == alpha]
        firsts = [r["first_error"] for r in runs if r["alpha"] == alpha]
        agg[alpha] = {
            "n": len(finals),
            "first_error_mu": mean(firsts),
            "final_error_mu": mean(finals),
            "final_error_sd": pstdev(finals) if len(finals) > 1 else 0.0,
        }
    base = agg[0.0]["final_error_mu"]
    for alpha in ALPHAS:
        agg[alpha]["delta_error_vs_no_momentum"] = agg[alpha]["final_error_mu"] - base

    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(
            [
                "alpha",
                "seeds",
                "steps",
                "first_error_mu",
                "final_error_mu",
                "final_error_sd",
                "delta_error_vs_no_momentum",
            ]
        )
        for alpha in ALPHAS:
            a = agg[alpha]
            w.writerow(
                [
                    alpha,
                    a["n"],
                    args.steps,
                    f"{a['first_error_mu']:.4f}",
                    f"{a['final_error_mu']:.4f}",
                    f"{a['final_error_sd']:.4f}",
                    f"{a['delta_error_vs_no_momentum']:.4f}",
                ]
            )

    md_path = out / "bench_micro.md"
    lines = []
    lines.append("### Micro-Benchmark: momentum on online XOR training")
    lines.append("")
    lines.append(
        f"- Seeds: `{args.seeds}`; Steps: `{args.steps}`; "
        f"Eta: `{args.eta}`; Window: `{args.window}`"
    )
    lines.append("")
    lines.append("| Momentum | First RMS (μ) | Final RMS (μ±σ) | Δ vs α=0 | Seeds | Steps |")
    lines.append("|---|---:|---:|---:|---:|---:|")
    for alpha in ALPHAS:
        finals = [r["final_error"] for r in runs if r["alpha"] == alpha]
        lines.append(
            f"| {_label(alpha)} | {agg[alpha]['first_error_mu']:.4f} | {_fmt_mu_sigma(finals)} | "
            f"{agg[alpha]['delta_error_vs_no_momentum']:+.4f} | {agg[alpha]['n']} | {args.steps} |"
        )
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
