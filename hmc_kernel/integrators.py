"""Leapfrog integration of Hamiltonian trajectories.

Convention: positions theta and momenta r have shape (..., dim). Batch
dimensions are integrated together and share one termination flag.

Every update returns an explicit ``(value, terminated)`` pair instead of
raising on divergence: a non-finite gradient is an expected event when a
trajectory runs into the edge of a constrained space.
"""

from dataclasses import dataclass, replace
from typing import NamedTuple

import torch

from .hamiltonians import EnergyModel
from .termination import combine, is_terminated, value_termination


class PhaseState(NamedTuple):
    """Phase space state (theta, r)."""
    theta: torch.Tensor  # position
    r: torch.Tensor  # momentum


def momentum_update(step_size: float, model: EnergyModel, theta: torch.Tensor,
                    r: torch.Tensor, terminated: bool = False
                    ) -> tuple[torch.Tensor, bool]:
    """r' = r - s * ∂H/∂θ(θ). Skipped once the call has terminated."""
    if is_terminated(terminated):
        return r, True
    grad, t = value_termination(model.grad_position, theta)
    terminated = combine(terminated, t)
    if not is_terminated(terminated):
        r = r - step_size * grad
    return r, terminated


def position_update(step_size: float, model: EnergyModel, theta: torch.Tensor,
                    r: torch.Tensor, terminated: bool = False
                    ) -> tuple[torch.Tensor, bool]:
    """θ' = θ + s * ∂H/∂r(r). Skipped once the call has terminated."""
    if is_terminated(terminated):
        return theta, True
    grad, t = value_termination(model.grad_momentum, r)
    terminated = combine(terminated, t)
    # Only move θ if no update to r so far hit a numerical issue.
    if not is_terminated(terminated):
        theta = theta + step_size * grad
    return theta, terminated


@dataclass(frozen=True)
class Leapfrog:
    """Symplectic, time-reversible leapfrog (Störmer-Verlet) integrator.

    Stateless: ``step`` is a pure function of its arguments, so one instance
    can be shared across threads as long as each caller owns its tensors.

    Args:
        step_size: Discretization step ε. Integration uses ε when ``n_steps``
            is positive and -ε when it is negative.
    """

    step_size: float

    def with_step_size(self, step_size: float) -> "Leapfrog":
        """New integrator with a different ε. ``self`` is left unchanged."""
        return replace(self, step_size=step_size)

    def step(self, model: EnergyModel, theta: torch.Tensor, r: torch.Tensor,
             n_steps: int = 1) -> tuple[torch.Tensor, torch.Tensor, bool]:
        """Advance (θ, r) by ``n_steps`` leapfrog steps.

        Negative ``n_steps`` simulates the dynamics backward in time.

        Args:
            model: Energy model supplying ∂H/∂θ and ∂H/∂r.
            theta: Positions (..., dim).
            r: Momenta (..., dim).
            n_steps: Number of steps, non-zero.

        Returns:
            (theta, r, success). On divergence the last valid state is
            returned and success is False.
        """
        if n_steps == 0:
            raise ValueError("n_steps must be non-zero")
        fwd = n_steps > 0
        n = abs(n_steps)
        eps = self.step_size if fwd else -self.step_size

        r_new, t = momentum_update(eps / 2, model, theta, r)
        for i in range(1, n + 1):
            theta_new, t = position_update(eps, model, theta, r_new, terminated=t)
            # Trailing half of step i and leading half of step i+1 are fused.
            r_new, t = momentum_update(eps / 2 if i == n else eps, model,
                                       theta_new, r_new, terminated=t)
            if not is_terminated(t):
                # For 1 <= i < n, r is half a step ahead of theta here.
                theta, r = theta_new, r_new
            else:
                # Undo the extra half step carried by the committed r.
                if 1 < i < n:
                    r, _ = momentum_update(-eps / 2, model, theta, r)
                break

        return theta, r, not is_terminated(t)

    def step_state(self, model: EnergyModel, state: PhaseState,
                   n_steps: int = 1) -> tuple[PhaseState, bool]:
        """Same as ``step`` on a PhaseState."""
        theta, r, success = self.step(model, state.theta, state.r, n_steps)
        return PhaseState(theta=theta, r=r), success
