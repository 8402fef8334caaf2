from __future__ import annotations

from nqsampler.config.presets import tfim_chain_small_config
from nqsampler.vmc.evaluation import evaluate_tfim_energy

if __name__ == "__main__":
    config = tfim_chain_small_config(seed=0)
    result = evaluate_tfim_energy(config)

    print("TFIM chain evaluation complete")
    print(f"Records: {result.record.n_records} x {config.sampler.batch_size} chains")
    print(f"Mean acceptance: {result.mean_acceptance:.3f}")
    print(f"Energy: {result.estimate.mean:.6f} ± {result.estimate.stderr:.6f}")
