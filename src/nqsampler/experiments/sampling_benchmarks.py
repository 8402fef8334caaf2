from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

import matplotlib.pyplot as plt

from nqsampler.config.presets import tfim_chain_benchmark_config
from nqsampler.config.schemas import ChainConfig, SamplerConfig
from nqsampler.utils.io import save_json
from nqsampler.utils.logging import configure_logging
from nqsampler.vmc.evaluation import build_tfim_sampler


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Time Metropolis sweeps against batch size")
    parser.add_argument("--output-dir", type=Path, default=Path("results/sampling_benchmarks"))
    parser.add_argument("--batch-sizes", type=int, nargs="+", default=[1, 8, 32, 128, 512])
    parser.add_argument("--n-sites", type=int, default=32)
    parser.add_argument("--sweeps", type=int, default=20)
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args()


def main() -> None:
    configure_logging(logging.INFO)
    args = parse_args()
    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    base = tfim_chain_benchmark_config(seed=11 if args.seed is None else args.seed)
    rows: list[dict[str, float | int]] = []

    for batch_size in args.batch_sizes:
        config = base.model_copy(
            update={
                "chain": ChainConfig(n_sites=args.n_sites, pbc=True),
                "sampler": SamplerConfig(batch_size=batch_size, seed=base.sampler.seed),
            }
        )
        sampler, _ = build_tfim_sampler(config)
        sampler.sweep()

        t0 = time.perf_counter()
        for _ in range(args.sweeps):
            sampler.sweep()
        dt = time.perf_counter() - t0

        rows.append(
            {
                "batch_size": batch_size,
                "seconds": dt,
                "configs_per_second": batch_size * args.sweeps / dt,
                "mean_acceptance": sampler.mean_acceptance,
            }
        )

    save_json(output_dir / "sampling_metrics.json", {"n_sites": args.n_sites, "rows": rows})

    fig, ax = plt.subplots(figsize=(6.0, 4.0))
    xs = [int(r["batch_size"]) for r in rows]
    ys = [float(r["configs_per_second"]) for r in rows]
    ax.plot(xs, ys, marker="o")
    ax.set_xscale("log", base=2)
    ax.set_yscale("log")
    ax.set_xlabel("Chains per machine call")
    ax.set_ylabel("Sampled configurations per second")
    ax.set_title(f"Metropolis throughput (N = {args.n_sites})")
    ax.grid(alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_dir / "sampling_throughput.png", dpi=150)
    plt.close(fig)


if __name__ == "__main__":
    main()
