from __future__ import annotations

import numpy as np
import pytest

from nqsampler.errors import ConfigurationError, ContractViolationError
from nqsampler.nqs.product import ProductMachine
from nqsampler.physics.hilbert import HilbertSpace, spin_hilbert
from nqsampler.physics.observables import DiagonalOperator, Magnetization
from nqsampler.physics.tfim import TransverseFieldIsing, build_chain_bonds, enumerate_spin_basis
from nqsampler.vmc.estimators import local_values


class _RecordingMachine:
    def __init__(self, inner: ProductMachine) -> None:
        self.inner = inner
        self.call_sizes: list[int] = []

    @property
    def hilbert(self) -> HilbertSpace:
        return self.inner.hilbert

    def log_val(self, configs: np.ndarray) -> np.ndarray:
        self.call_sizes.append(int(configs.shape[0]))
        return self.inner.log_val(configs)


class _MismatchedOperator:
    def connected_configurations(self, config: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return np.stack([config, -config]), np.ones(3, dtype=np.complex128)


class _EmptyOperator:
    def __init__(self, n_sites: int) -> None:
        self.n_sites = n_sites

    def connected_configurations(self, config: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return np.zeros((0, self.n_sites)), np.zeros(0, dtype=np.complex128)


def _random_machine(n_sites: int, seed: int) -> ProductMachine:
    rng = np.random.default_rng(seed)
    machine = ProductMachine(spin_hilbert(n_sites))
    machine.parameters = 0.4 * rng.normal(size=machine.n_par) + 0.3j * rng.normal(size=machine.n_par)
    return machine


def _tfim(n_sites: int, J: float = 1.0, h: float = 0.7) -> TransverseFieldIsing:
    return TransverseFieldIsing(
        hilbert=spin_hilbert(n_sites),
        bonds=build_chain_bonds(n_sites, pbc=True),
        J=J,
        h=h,
    )


def test_constant_diagonal_operator_gives_constant() -> None:
    machine = _random_machine(4, seed=0)
    basis = enumerate_spin_basis(4)
    op = DiagonalOperator(hilbert=machine.hilbert, func=lambda s: 2.5)

    local = local_values(basis, machine.log_val(basis), machine, op, batch_size=5)

    np.testing.assert_array_equal(local, np.full(basis.shape[0], 2.5 + 0.0j))


def test_magnetization_local_values_equal_configuration_average() -> None:
    machine = _random_machine(5, seed=1)
    samples = enumerate_spin_basis(5)[::3]
    local = local_values(samples, machine.log_val(samples), machine, Magnetization(machine.hilbert), 7)
    np.testing.assert_allclose(local.real, samples.mean(axis=1))
    np.testing.assert_allclose(local.imag, 0.0)


def test_tfim_local_energy_matches_dense_hamiltonian() -> None:
    n_sites = 4
    machine = _random_machine(n_sites, seed=2)
    hamiltonian = _tfim(n_sites)

    basis = enumerate_spin_basis(n_sites)
    log_psi = machine.log_val(basis)
    psi = np.exp(log_psi)
    expected = (hamiltonian.to_dense() @ psi) / psi

    local = local_values(basis, log_psi, machine, hamiltonian, batch_size=8)

    np.testing.assert_allclose(local, expected, rtol=1e-10, atol=1e-12)


@pytest.mark.parametrize("batch_size", [1, 3, 1000])
def test_local_values_do_not_depend_on_batch_size(batch_size: int) -> None:
    n_sites = 5
    machine = _random_machine(n_sites, seed=3)
    hamiltonian = _tfim(n_sites, h=1.3)
    basis = enumerate_spin_basis(n_sites)
    log_psi = machine.log_val(basis)

    reference = local_values(basis, log_psi, machine, hamiltonian, batch_size=64)
    local = local_values(basis, log_psi, machine, hamiltonian, batch_size=batch_size)

    np.testing.assert_allclose(local, reference, rtol=1e-12, atol=1e-12)


def test_machine_calls_respect_batch_size() -> None:
    n_sites = 4
    machine = _RecordingMachine(_random_machine(n_sites, seed=4))
    hamiltonian = _tfim(n_sites)
    basis = enumerate_spin_basis(n_sites)

    local_values(basis, machine.inner.log_val(basis), machine, hamiltonian, batch_size=6)

    assert machine.call_sizes
    assert max(machine.call_sizes) <= 6
    assert sum(machine.call_sizes) == basis.shape[0] * (n_sites + 1)


def test_leading_shape_is_preserved() -> None:
    n_sites = 3
    machine = _random_machine(n_sites, seed=5)
    rng = np.random.default_rng(5)
    samples = rng.choice([-1.0, 1.0], size=(3, 2, n_sites))
    values = machine.log_val(samples.reshape(-1, n_sites)).reshape(3, 2)

    local = local_values(samples, values, machine, _tfim(n_sites), batch_size=4)
    flat = local_values(samples.reshape(-1, n_sites), values.reshape(-1), machine, _tfim(n_sites), 4)

    assert local.shape == (3, 2)
    np.testing.assert_array_equal(local.reshape(-1), flat)


def test_operator_without_connections_gives_zero() -> None:
    machine = _random_machine(3, seed=6)
    basis = enumerate_spin_basis(3)
    local = local_values(basis, machine.log_val(basis), machine, _EmptyOperator(3), batch_size=2)
    np.testing.assert_array_equal(local, np.zeros(basis.shape[0], dtype=np.complex128))


def test_zero_field_keeps_only_diagonal_term() -> None:
    machine = _random_machine(4, seed=7)
    hamiltonian = _tfim(4, J=0.5, h=0.0)
    basis = enumerate_spin_basis(4)
    local = local_values(basis, machine.log_val(basis), machine, hamiltonian, batch_size=3)
    np.testing.assert_allclose(local, np.diag(hamiltonian.to_dense()))


def test_mismatched_operator_output_is_a_contract_violation() -> None:
    machine = _random_machine(3, seed=8)
    basis = enumerate_spin_basis(3)
    with pytest.raises(ContractViolationError):
        local_values(basis, machine.log_val(basis), machine, _MismatchedOperator(), batch_size=4)


def test_invalid_arguments_are_rejected() -> None:
    machine = _random_machine(3, seed=9)
    basis = enumerate_spin_basis(3)
    log_psi = machine.log_val(basis)

    with pytest.raises(ConfigurationError):
        local_values(basis, log_psi, machine, _tfim(3), batch_size=0)
    with pytest.raises(ConfigurationError):
        local_values(basis, log_psi[:-1], machine, _tfim(3), batch_size=4)
    with pytest.raises(ConfigurationError):
        local_values(basis[:, :2], log_psi, machine, _tfim(3), batch_size=4)
