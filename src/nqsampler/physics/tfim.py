from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from nqsampler.errors import ConfigurationError
from nqsampler.physics.hilbert import HilbertSpace
from nqsampler.types import ComplexArray, Config, ConfigBatch, FloatArray, IntArray


@dataclass(frozen=True)
class SquareLattice:
    """Periodic LxL square lattice in row-major index order."""

    L: int

    def __post_init__(self) -> None:
        if self.L < 2:
            raise ConfigurationError("L must be >= 2 for periodic lattices")

    @property
    def n_sites(self) -> int:
        return self.L * self.L

    def index(self, row: int, col: int) -> int:
        return (row % self.L) * self.L + (col % self.L)


def build_nearest_neighbor_bonds(L: int) -> IntArray:
    """Build unique nearest-neighbor bonds for periodic square lattice.

    Returns an array of shape ``(2 * L * L, 2)`` containing right and down
    neighbors for each site, which is sufficient to cover each undirected bond
    exactly once.
    """

    lattice = SquareLattice(L)
    bonds: list[tuple[int, int]] = []
    for r in range(L):
        for c in range(L):
            i = lattice.index(r, c)
            bonds.append((i, lattice.index(r, c + 1)))
            bonds.append((i, lattice.index(r + 1, c)))
    return np.asarray(bonds, dtype=np.int64)


def build_chain_bonds(n_sites: int, pbc: bool = True) -> IntArray:
    """Nearest-neighbor bonds ``(i, i + 1)`` of a 1D chain."""

    if n_sites < 2:
        raise ConfigurationError("a chain needs at least two sites")
    bonds = [(i, i + 1) for i in range(n_sites - 1)]
    if pbc and n_sites > 2:
        bonds.append((n_sites - 1, 0))
    return np.asarray(bonds, dtype=np.int64).reshape(-1, 2)


def diagonal_energy(spins: Config, bonds: IntArray, J: float) -> float:
    """Compute ``-J * sum_<i,j> s_i s_j`` for one configuration."""

    if spins.ndim != 1:
        raise ConfigurationError(f"spins must be rank-1, received shape {spins.shape}")

    pair_products = spins[bonds[:, 0]] * spins[bonds[:, 1]]
    return float(-J * np.sum(pair_products, dtype=np.float64))


def diagonal_energy_batch(spins: ConfigBatch, bonds: IntArray, J: float) -> FloatArray:
    """Vectorized diagonal TFIM contribution for a batch of spin states."""

    if spins.ndim != 2:
        raise ConfigurationError(f"spins must be rank-2, received shape {spins.shape}")
    pair_products = spins[:, bonds[:, 0]] * spins[:, bonds[:, 1]]
    energies = -J * np.sum(pair_products, axis=1, dtype=np.float64)
    return np.asarray(energies, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class TransverseFieldIsing:
    """``H = -J sum_<ij> s^z_i s^z_j - h sum_i s^x_i`` in the ``s^z`` basis.

    Spins take the values ``{-1, +1}``. Each configuration connects to itself
    through the diagonal term and to its ``N`` single-flip neighbours with
    matrix element ``-h``.
    """

    hilbert: HilbertSpace
    bonds: IntArray
    J: float = 1.0
    h: float = 1.0
    _flip_rows: FloatArray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        n_sites = self.hilbert.n_sites
        for site in range(n_sites):
            if not np.array_equal(self.hilbert.local_states(site), (-1.0, 1.0)):
                raise ConfigurationError("TransverseFieldIsing requires spin-1/2 sites {-1, +1}")
        bonds = np.asarray(self.bonds, dtype=np.int64)
        if bonds.ndim != 2 or bonds.shape[1] != 2:
            raise ConfigurationError("bonds must have shape (n_bonds, 2)")
        if bonds.size and (bonds.min() < 0 or bonds.max() >= n_sites):
            raise ConfigurationError("bond endpoints must be valid site indices")
        object.__setattr__(self, "bonds", bonds)
        # Row k multiplies a configuration to flip site k.
        flips = np.ones((n_sites, n_sites), dtype=np.float64)
        np.fill_diagonal(flips, -1.0)
        object.__setattr__(self, "_flip_rows", flips)

    def connected_configurations(self, config: Config) -> tuple[ConfigBatch, ComplexArray]:
        config = np.asarray(config, dtype=np.float64)
        n_sites = self.hilbert.n_sites
        if config.shape != (n_sites,):
            raise ConfigurationError(f"config must have shape ({n_sites},), received {config.shape}")

        configs = np.empty((n_sites + 1, n_sites), dtype=np.float64)
        configs[0] = config
        configs[1:] = self._flip_rows * config[None, :]

        mels = np.full(n_sites + 1, -self.h, dtype=np.complex128)
        mels[0] = diagonal_energy(config, self.bonds, self.J)
        if self.h == 0.0:
            return configs[:1], mels[:1]
        return configs, mels

    def to_dense(self) -> ComplexArray:
        """Dense matrix in the lexicographic basis, for small-system checks."""

        n_sites = self.hilbert.n_sites
        basis = enumerate_spin_basis(n_sites)
        index = {tuple(row): k for k, row in enumerate(basis)}
        dense = np.zeros((basis.shape[0], basis.shape[0]), dtype=np.complex128)
        for row, config in enumerate(basis):
            conns, mels = self.connected_configurations(config)
            for conn, mel in zip(conns, mels):
                dense[row, index[tuple(conn)]] += mel
        return dense


def enumerate_spin_basis(n_sites: int) -> ConfigBatch:
    """All ``2**n_sites`` spin-1/2 configurations, first site most significant."""

    if n_sites < 1 or n_sites > 20:
        raise ConfigurationError("basis enumeration is limited to 1..20 sites")
    codes = np.arange(2**n_sites, dtype=np.int64)
    bits = (codes[:, None] >> np.arange(n_sites - 1, -1, -1)[None, :]) & 1
    return (2.0 * bits - 1.0).astype(np.float64)
