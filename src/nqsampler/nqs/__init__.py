from nqsampler.nqs.base import (
    GradientMachine,
    Machine,
    evaluate_log_val,
    evaluate_log_val_gradient,
    supports_gradients,
)
from nqsampler.nqs.parameterization import (
    FlatParameterLayout,
    build_layout,
    flatten_batch_with_layout,
    flatten_with_layout,
    unflatten_with_layout,
)
from nqsampler.nqs.product import ProductMachine
from nqsampler.nqs.rbm import RbmParams, RbmSpin, init_rbm, rbm_log_psi

__all__ = [
    "FlatParameterLayout",
    "GradientMachine",
    "Machine",
    "ProductMachine",
    "RbmParams",
    "RbmSpin",
    "build_layout",
    "evaluate_log_val",
    "evaluate_log_val_gradient",
    "flatten_batch_with_layout",
    "flatten_with_layout",
    "init_rbm",
    "rbm_log_psi",
    "supports_gradients",
    "unflatten_with_layout",
]
