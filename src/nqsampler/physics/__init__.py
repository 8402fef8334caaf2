from nqsampler.physics.hilbert import (
    DiscreteHilbert,
    HilbertSpace,
    admissible_rows,
    boson_hilbert,
    local_state_table,
    spin_hilbert,
)
from nqsampler.physics.observables import (
    DiagonalOperator,
    Magnetization,
    Operator,
    magnetization,
    magnetization_batch,
    nearest_neighbor_correlator,
)
from nqsampler.physics.tfim import (
    SquareLattice,
    TransverseFieldIsing,
    build_chain_bonds,
    build_nearest_neighbor_bonds,
    diagonal_energy,
    diagonal_energy_batch,
    enumerate_spin_basis,
)

__all__ = [
    "DiagonalOperator",
    "DiscreteHilbert",
    "HilbertSpace",
    "Magnetization",
    "Operator",
    "SquareLattice",
    "TransverseFieldIsing",
    "admissible_rows",
    "boson_hilbert",
    "build_chain_bonds",
    "build_nearest_neighbor_bonds",
    "diagonal_energy",
    "diagonal_energy_batch",
    "enumerate_spin_basis",
    "local_state_table",
    "magnetization",
    "magnetization_batch",
    "nearest_neighbor_correlator",
    "spin_hilbert",
]
