"""Energy models for Hamiltonian trajectories.

The integrator only needs an object with ``grad_position`` and
``grad_momentum``. The potentials below are reference models used by the
tests and demos; all are vectorized over arbitrary batch dimensions.
"""

from typing import Callable, Protocol

import torch
import torch.nn as nn


class EnergyModel(Protocol):
    """Gradient oracle consumed by the integrator.

    Either method may return non-finite components to signal that the
    trajectory left the numerically valid region.
    """

    def grad_position(self, theta: torch.Tensor) -> torch.Tensor: ...

    def grad_momentum(self, r: torch.Tensor) -> torch.Tensor: ...


class Potential(nn.Module):
    """Base class for potentials U(x). Subclasses must implement energy()."""

    def energy(self, x: torch.Tensor) -> torch.Tensor:
        """Compute potential energy. Override in subclass."""
        raise NotImplementedError

    def grad(self, x: torch.Tensor) -> torch.Tensor:
        """Compute dU/dx. Works for any batch shape. No graph is retained."""
        with torch.enable_grad():
            x = x.detach().requires_grad_(True)
            u = self.energy(x)
            g = torch.autograd.grad(u.sum(), x)[0]
        return g.detach()

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.energy(x)


class Harmonic(Potential):
    """Isotropic harmonic well: U(x) = 0.5 * k * ||x - x0||².

    Input shape: (..., d). Output shape: (...,).
    """

    def __init__(self, k: float = 1.0, center: torch.Tensor | None = None):
        super().__init__()
        self.k = nn.Parameter(torch.tensor(k, dtype=torch.float64))
        if center is not None:
            self.center = nn.Parameter(center.clone())
        else:
            self.center = None

    def energy(self, x: torch.Tensor) -> torch.Tensor:
        if self.center is not None:
            x = x - self.center
        return 0.5 * self.k.to(x.dtype) * (x**2).sum(-1)


class Gaussian(Potential):
    """Zero-mean Gaussian target: U(x) = 0.5 * x^T P x for precision P.

    Input shape: (..., d). Output shape: (...,).
    """

    def __init__(self, precision: torch.Tensor):
        super().__init__()
        if precision.ndim != 2 or precision.shape[0] != precision.shape[1]:
            raise ValueError(f"precision must be a square matrix, got shape {tuple(precision.shape)}")
        self.precision = nn.Parameter(precision.clone())

    def energy(self, x: torch.Tensor) -> torch.Tensor:
        P = self.precision.to(x.dtype)
        return 0.5 * (x * (x @ P.T)).sum(-1)


class DoubleWell(Potential):
    """Double well along every axis: U(x) = a * Σ (x_i² - 1)².

    Minima at x_i = ±1, barrier of height a per axis at x_i = 0.
    """

    def __init__(self, barrier_height: float = 1.0):
        super().__init__()
        self.barrier_height = nn.Parameter(torch.tensor(barrier_height, dtype=torch.float64))

    def energy(self, x: torch.Tensor) -> torch.Tensor:
        return self.barrier_height.to(x.dtype) * ((x**2 - 1)**2).sum(-1)


class LogDensity(Potential):
    """Potential from an unnormalized log density: U(x) = -log p(x)."""

    def __init__(self, log_prob_fn: Callable[[torch.Tensor], torch.Tensor]):
        super().__init__()
        self.log_prob_fn = log_prob_fn

    def energy(self, x: torch.Tensor) -> torch.Tensor:
        return -self.log_prob_fn(x)


class Hamiltonian:
    """Separable Hamiltonian H(θ, r) = U(θ) + 0.5 * r^T M^{-1} r.

    Args:
        potential: Potential energy U.
        inv_mass: Diagonal of the inverse mass matrix, scalar or (d,) tensor.
    """

    def __init__(self, potential: Potential, inv_mass: float | torch.Tensor = 1.0):
        self.potential = potential
        self.inv_mass = inv_mass

    def grad_position(self, theta: torch.Tensor) -> torch.Tensor:
        """∂H/∂θ = ∂U/∂θ"""
        return self.potential.grad(theta)

    def grad_momentum(self, r: torch.Tensor) -> torch.Tensor:
        """∂H/∂r = M^{-1} r"""
        return self.inv_mass * r

    def kinetic_energy(self, r: torch.Tensor) -> torch.Tensor:
        return 0.5 * (r * self.inv_mass * r).sum(-1)

    def energy(self, theta: torch.Tensor, r: torch.Tensor) -> torch.Tensor:
        """Total energy. Returns (...,) for inputs (..., d)."""
        return self.potential.energy(theta) + self.kinetic_energy(r)
