from nqsampler.utils.checks import require_finite, require_positive_int, require_shape
from nqsampler.utils.io import load_samples, save_json, save_samples
from nqsampler.utils.logging import configure_logging, log_event
from nqsampler.utils.rng import RngStreams, chain_generators, chain_seed_sequence, fresh_seed

__all__ = [
    "RngStreams",
    "chain_generators",
    "chain_seed_sequence",
    "configure_logging",
    "fresh_seed",
    "load_samples",
    "log_event",
    "require_finite",
    "require_positive_int",
    "require_shape",
    "save_json",
    "save_samples",
]
