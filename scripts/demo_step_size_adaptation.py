"""Warm up a step size with dual averaging on a correlated 2D Gaussian.

Runs a minimal HMC loop (momentum refresh, leapfrog, Metropolis correction)
around the core and plots the step-size trace and acceptance rates.

Pass a YAML config path as the first argument to override the defaults.
"""

import os
import sys
import math
import torch
import matplotlib.pyplot as plt

from hmc_kernel.hamiltonians import Gaussian, Hamiltonian
from hmc_kernel.adaptation import adapt, current_step_size
from hmc_kernel.config import HMCConfig, StepSizeConfig, build_adapter, build_integrator, load_config
from hmc_kernel.plotting import apply_style, get_assets_dir, get_figsize, COLORS, FIG_WIDTH_DOUBLE
from hmc_kernel.utils.logging import setup_logging


if len(sys.argv) > 1:
    config = load_config(sys.argv[1])
else:
    config = HMCConfig(step_size=StepSizeConfig(kind="dual_averaging", initial_step_size=1.0,
                                                target_accept=0.8))
if config.step_size.kind != "dual_averaging":
    sys.exit("this demo needs step_size.kind: dual_averaging")

setup_logging(level=config.logging.level, rich_tracebacks=config.logging.rich_tracebacks)
apply_style()
torch.manual_seed(0)

precision = torch.tensor([[1.0, 0.9], [0.9, 1.0]], dtype=torch.float64).inverse()
model = Hamiltonian(Gaussian(precision))
adapter = build_adapter(config.step_size)
lf = build_integrator(config.integrator).with_step_size(current_step_size(adapter))

n_warmup, n_steps = 500, config.integrator.n_steps
theta = torch.zeros(2, dtype=torch.float64)
step_sizes, averaged, accept_probs = [], [], []
n_divergent = 0

for it in range(n_warmup):
    r = torch.randn_like(theta)
    lf = lf.with_step_size(current_step_size(adapter))
    theta_new, r_new, success = lf.step(model, theta, r, n_steps)
    if success:
        log_ratio = (model.energy(theta, r) - model.energy(theta_new, r_new)).item()
        accept_prob = math.exp(min(0.0, log_ratio))
    else:
        n_divergent += 1
        accept_prob = 0.0
    if torch.rand(()).item() < accept_prob:
        theta = theta_new
    adapt(adapter, theta, accept_prob)
    step_sizes.append(current_step_size(adapter))
    averaged.append(adapter.averaged_step_size)
    accept_probs.append(accept_prob)

window = 50
running = [sum(accept_probs[max(0, i - window + 1):i + 1]) / min(i + 1, window)
           for i in range(n_warmup)]

fig, axes = plt.subplots(1, 2, figsize=get_figsize(FIG_WIDTH_DOUBLE, ncols=2), constrained_layout=True)

ax = axes[0]
ax.plot(step_sizes, color=COLORS["step_size"], label="ε")
ax.plot(averaged, color=COLORS["averaged"], label="exp(x̄)")
ax.set_yscale("log")
ax.set_xlabel("Warmup iteration")
ax.set_ylabel("Step size")
ax.set_title("Dual averaging", fontweight="bold")
ax.legend()

ax = axes[1]
ax.plot(running, color=COLORS["accept"], label=f"running mean ({window})")
ax.axhline(config.step_size.target_accept, color=COLORS["target"], ls="--", label="target δ")
ax.set_ylim(0, 1.05)
ax.set_xlabel("Warmup iteration")
ax.set_ylabel("Acceptance probability")
ax.set_title(f"Acceptance ({n_divergent} divergent)", fontweight="bold")
ax.legend()

out = os.path.join(get_assets_dir(), "step_size_adaptation.png")
plt.savefig(out, dpi=150, bbox_inches="tight")
print(f"final step size {current_step_size(adapter):.4f}, averaged {adapter.averaged_step_size:.4f}")
print(f"Saved plot to {out}")
