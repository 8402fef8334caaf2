from __future__ import annotations

import numpy as np
import pytest

from nqsampler.errors import ConfigurationError
from nqsampler.physics.hilbert import spin_hilbert
from nqsampler.physics.observables import Magnetization, magnetization_batch, nearest_neighbor_correlator
from nqsampler.physics.tfim import (
    SquareLattice,
    TransverseFieldIsing,
    build_chain_bonds,
    build_nearest_neighbor_bonds,
    diagonal_energy,
    diagonal_energy_batch,
    enumerate_spin_basis,
)


def test_nearest_neighbor_bonds_count() -> None:
    lattice = SquareLattice(L=4)
    bonds = build_nearest_neighbor_bonds(lattice.L)
    assert bonds.shape == (2 * lattice.n_sites, 2)


def test_chain_bonds() -> None:
    np.testing.assert_array_equal(build_chain_bonds(4, pbc=False), [[0, 1], [1, 2], [2, 3]])
    assert build_chain_bonds(4, pbc=True).shape == (4, 2)
    # Two sites share a single bond even with periodic boundaries.
    assert build_chain_bonds(2, pbc=True).shape == (1, 2)
    with pytest.raises(ConfigurationError):
        build_chain_bonds(1)


def test_tfim_diagonal_energy_known_case() -> None:
    bonds = build_nearest_neighbor_bonds(2)
    spins = np.ones(4, dtype=np.float64)
    energy = diagonal_energy(spins=spins, bonds=bonds, J=1.0)
    assert energy == -8.0


def test_diagonal_energy_batch_matches_single() -> None:
    bonds = build_chain_bonds(5)
    basis = enumerate_spin_basis(5)
    batch = diagonal_energy_batch(basis, bonds, J=0.8)
    single = [diagonal_energy(s, bonds, J=0.8) for s in basis]
    np.testing.assert_allclose(batch, single)


def test_connected_configurations_are_single_flips() -> None:
    n_sites = 4
    hamiltonian = TransverseFieldIsing(spin_hilbert(n_sites), build_chain_bonds(n_sites), J=1.0, h=0.5)
    config = np.array([1.0, -1.0, -1.0, 1.0])

    configs, mels = hamiltonian.connected_configurations(config)

    assert configs.shape == (n_sites + 1, n_sites)
    np.testing.assert_array_equal(configs[0], config)
    assert mels[0] == diagonal_energy(config, hamiltonian.bonds, 1.0)
    for k in range(n_sites):
        diff = np.flatnonzero(configs[k + 1] != config)
        np.testing.assert_array_equal(diff, [k])
    np.testing.assert_array_equal(mels[1:], np.full(n_sites, -0.5))


def test_dense_hamiltonian_is_hermitian_with_known_ground_state_bound() -> None:
    hamiltonian = TransverseFieldIsing(spin_hilbert(4), build_chain_bonds(4), J=1.0, h=1.0)
    dense = hamiltonian.to_dense()
    np.testing.assert_allclose(dense, dense.conj().T)
    ground = np.linalg.eigvalsh(dense)[0]
    # Ferromagnetic diagonal energy -N is only an upper bound once h > 0.
    assert ground < -4.0


def test_enumerate_spin_basis_order() -> None:
    basis = enumerate_spin_basis(2)
    np.testing.assert_array_equal(basis, [[-1, -1], [-1, 1], [1, -1], [1, 1]])


def test_tfim_rejects_non_spin_half_sites() -> None:
    with pytest.raises(ConfigurationError):
        TransverseFieldIsing(spin_hilbert(3, s=1.0), build_chain_bonds(3))
    with pytest.raises(ConfigurationError):
        TransverseFieldIsing(spin_hilbert(3), np.array([[0, 3]]))


def test_magnetization_and_correlator() -> None:
    spins = np.array([1.0, 1.0, -1.0, 1.0])
    op = Magnetization(spin_hilbert(4))
    configs, mels = op.connected_configurations(spins)
    np.testing.assert_array_equal(configs, spins[None, :])
    assert mels[0] == 0.5
    assert nearest_neighbor_correlator(spins, build_chain_bonds(4)) == 0.0
    np.testing.assert_allclose(magnetization_batch(np.stack([spins, -spins])), [0.5, -0.5])
