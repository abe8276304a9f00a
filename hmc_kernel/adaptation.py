"""Step-size adaptation for HMC warmup.

Three adapters share one interface:

- ``current_step_size()``: step size to integrate the next trajectory with.
- ``adapt(theta, accept_prob)``: consume one acceptance statistic.

``FixedStepSize`` and ``ManualStepSizeAdapter`` never change on their own.
``DualAveraging`` runs the Nesterov dual averaging recursion of Hoffman &
Gelman (2014), Sec. 3.2, with Stan's default hyperparameters.

The dual averaging recursion depends on the exact order of updates. An
adapter shared between chains must have its ``adapt`` calls serialized by
the caller; there is no locking here. Freezing adaptation after warmup is
done by simply no longer calling ``adapt``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Union

import torch

logger = logging.getLogger(__name__)


def _check_step_size(step_size: float) -> float:
    step_size = float(step_size)
    if not (math.isfinite(step_size) and step_size > 0):
        raise ValueError(f"step size must be finite and positive, got {step_size}")
    return step_size


@dataclass(frozen=True)
class FixedStepSize:
    """Constant step size."""

    step_size: float

    def __post_init__(self):
        object.__setattr__(self, "step_size", _check_step_size(self.step_size))

    def current_step_size(self) -> float:
        return self.step_size

    def adapt(self, theta: torch.Tensor | None, accept_prob: float) -> None:
        pass


class ManualStepSizeAdapter:
    """Step size set directly by the caller through ``step_size``."""

    def __init__(self, step_size: float):
        self.step_size = _check_step_size(step_size)

    def current_step_size(self) -> float:
        return self.step_size

    def adapt(self, theta: torch.Tensor | None, accept_prob: float) -> None:
        pass

    def __repr__(self) -> str:
        return f"ManualStepSizeAdapter(step_size={self.step_size})"


def compute_mu(step_size: float) -> float:
    """Shrinkage target μ = log(10 ε₀)."""
    return math.log(10 * step_size)


@dataclass
class DualAveragingState:
    """Mutable dual averaging state.

    Attributes:
        m: Number of acceptance samples consumed.
        step_size: Current step size ε. Always finite and positive.
        mu: Shrinkage target for log ε.
        x_bar: Running average of log ε.
        h_bar: Running average of (δ - α).
    """

    m: int
    step_size: float
    mu: float
    x_bar: float = 0.0
    h_bar: float = 0.0

    @classmethod
    def from_step_size(cls, step_size: float) -> "DualAveragingState":
        step_size = _check_step_size(step_size)
        return cls(m=0, step_size=step_size, mu=compute_mu(step_size))

    def reset(self) -> None:
        """Restart the recursion around the current step size."""
        self.mu = compute_mu(self.step_size)
        self.m = 0
        self.x_bar = 0.0
        self.h_bar = 0.0


class DualAveraging:
    """Dual averaging step-size adaptation toward a target acceptance rate.

    Args:
        delta: Target acceptance probability δ.
        initial_step_size: Starting step size ε₀, also sets μ = log(10 ε₀).
        gamma: Shrinkage rate γ.
        t0: Stabilization offset t₀, damps the first iterations.
        kappa: Forgetting exponent κ of the averaged iterate.

    ``gamma``, ``t0`` and ``kappa`` are keyword-only; use
    ``from_hyperparameters`` to pass all five values positionally.
    """

    def __init__(self, delta: float, initial_step_size: float, *,
                 gamma: float = 0.05, t0: float = 10.0, kappa: float = 0.75):
        if gamma <= 0:
            raise ValueError(f"gamma must be positive, got {gamma}")
        if t0 < 0:
            raise ValueError(f"t0 must be non-negative, got {t0}")
        if kappa <= 0:
            raise ValueError(f"kappa must be positive, got {kappa}")
        self._gamma = float(gamma)
        self._t0 = float(t0)
        self._kappa = float(kappa)
        self._delta = float(delta)
        self.state = DualAveragingState.from_step_size(initial_step_size)

    @classmethod
    def from_hyperparameters(cls, gamma: float, t0: float, kappa: float, delta: float,
                             initial_step_size: float) -> "DualAveraging":
        """Full form taking (γ, t₀, κ, δ, ε₀) in that order."""
        return cls(delta, initial_step_size, gamma=gamma, t0=t0, kappa=kappa)

    @property
    def gamma(self) -> float:
        return self._gamma

    @property
    def t0(self) -> float:
        return self._t0

    @property
    def kappa(self) -> float:
        return self._kappa

    @property
    def delta(self) -> float:
        return self._delta

    def current_step_size(self) -> float:
        return self.state.step_size

    @property
    def averaged_step_size(self) -> float:
        """exp(x_bar), the averaged iterate. Current step size before any update."""
        if self.state.m == 0:
            return self.state.step_size
        return math.exp(self.state.x_bar)

    def reset(self) -> None:
        self.state.reset()

    def adapt(self, theta: torch.Tensor | None, accept_prob: float) -> None:
        self.adapt_step_size(accept_prob)

    def adapt_step_size(self, accept_prob: float) -> None:
        """One dual averaging update from an observed acceptance probability.

        Ref: https://github.com/stan-dev/stan/blob/develop/src/stan/mcmc/stepsize_adaptation.hpp
        """
        state = self.state
        state.m += 1
        m = state.m

        # Clip average MH acceptance probability
        alpha = min(float(accept_prob), 1.0)

        eta_h = 1.0 / (m + self.t0)
        h_bar = (1.0 - eta_h) * state.h_bar + eta_h * (self.delta - alpha)

        x = state.mu - h_bar * math.sqrt(m) / self.gamma  # x = log ε
        eta_x = m ** (-self.kappa)
        x_bar = (1.0 - eta_x) * state.x_bar + eta_x * x

        try:
            step_size = math.exp(x)
        except OverflowError:
            step_size = math.inf
        logger.debug("Adapting step size: alpha=%s, new step size=%s, old step size=%s",
                     alpha, step_size, state.step_size)

        if not (math.isfinite(step_size) and step_size > 0):
            logger.warning("Invalid step size %s at iteration %d; keeping previous step size %s",
                           step_size, m, state.step_size)
            return

        state.step_size = step_size
        state.x_bar = x_bar
        state.h_bar = h_bar

    def __repr__(self) -> str:
        return (f"DualAveraging(gamma={self.gamma}, t0={self.t0}, kappa={self.kappa}, "
                f"delta={self.delta}, state={self.state})")


StepSizeAdapter = Union[FixedStepSize, ManualStepSizeAdapter, DualAveraging]


def current_step_size(adapter: StepSizeAdapter) -> float:
    """Step size the next trajectory should use."""
    return adapter.current_step_size()


def adapt(adapter: StepSizeAdapter, theta: torch.Tensor | None, accept_prob: float) -> None:
    """Feed one acceptance statistic back into the adapter.

    ``theta`` is the current position; it is unused by step-size adapters.
    """
    adapter.adapt(theta, accept_prob)
