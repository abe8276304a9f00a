"""Configuration for the integrator, the step-size adapter and logging."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .adaptation import DualAveraging, FixedStepSize, ManualStepSizeAdapter, StepSizeAdapter
from .integrators import Leapfrog

ADAPTER_KINDS = ("fixed", "manual", "dual_averaging")


@dataclass
class IntegratorConfig:
    """Leapfrog step size and trajectory length."""

    step_size: float = 0.1
    n_steps: int = 10


@dataclass
class StepSizeConfig:
    """Which step-size adapter to build and its hyper-parameters."""

    kind: str = "dual_averaging"
    initial_step_size: float = 0.1
    target_accept: float = 0.8
    gamma: float = 0.05
    t0: float = 10.0
    kappa: float = 0.75


@dataclass
class LoggingConfig:
    """Logging verbosity and formatting options."""

    level: str = "INFO"
    rich_tracebacks: bool = True


@dataclass
class HMCConfig:
    """Top-level configuration object composed of sub-configurations."""

    integrator: IntegratorConfig = field(default_factory=IntegratorConfig)
    step_size: StepSizeConfig = field(default_factory=StepSizeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml(path: Path) -> Mapping[str, Any]:
    """Load a YAML document and return a mapping."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def config_from_mapping(raw: Mapping[str, Any]) -> HMCConfig:
    """Build :class:`HMCConfig` from a nested mapping, filling in defaults."""

    integrator = raw.get("integrator") or {}
    step_size = raw.get("step_size") or {}
    logging_cfg = raw.get("logging") or {}

    int_defaults = IntegratorConfig()
    defaults = StepSizeConfig()
    kind = str(step_size.get("kind", defaults.kind))
    if kind not in ADAPTER_KINDS:
        raise ValueError(f"Unknown step size adapter {kind!r}, expected one of {ADAPTER_KINDS}")

    return HMCConfig(
        integrator=IntegratorConfig(
            step_size=float(integrator.get("step_size", int_defaults.step_size)),
            n_steps=int(integrator.get("n_steps", int_defaults.n_steps)),
        ),
        step_size=StepSizeConfig(
            kind=kind,
            initial_step_size=float(step_size.get("initial_step_size", defaults.initial_step_size)),
            target_accept=float(step_size.get("target_accept", defaults.target_accept)),
            gamma=float(step_size.get("gamma", defaults.gamma)),
            t0=float(step_size.get("t0", defaults.t0)),
            kappa=float(step_size.get("kappa", defaults.kappa)),
        ),
        logging=LoggingConfig(
            level=str(logging_cfg.get("level", "INFO")),
            rich_tracebacks=bool(logging_cfg.get("rich_tracebacks", True)),
        ),
    )


def load_config(path: Path) -> HMCConfig:
    """Load :class:`HMCConfig` from the YAML file at ``path``."""

    return config_from_mapping(load_yaml(path))


def build_integrator(config: IntegratorConfig) -> Leapfrog:
    if config.n_steps == 0:
        raise ValueError("n_steps must be non-zero")
    return Leapfrog(step_size=config.step_size)


def build_adapter(config: StepSizeConfig) -> StepSizeAdapter:
    """Instantiate the step-size adapter described by ``config``."""

    if config.kind == "fixed":
        return FixedStepSize(config.initial_step_size)
    if config.kind == "manual":
        return ManualStepSizeAdapter(config.initial_step_size)
    if config.kind == "dual_averaging":
        return DualAveraging(
            delta=config.target_accept,
            initial_step_size=config.initial_step_size,
            gamma=config.gamma,
            t0=config.t0,
            kappa=config.kappa,
        )
    raise ValueError(f"Unknown step size adapter {config.kind!r}, expected one of {ADAPTER_KINDS}")


__all__ = [
    "IntegratorConfig",
    "StepSizeConfig",
    "LoggingConfig",
    "HMCConfig",
    "load_yaml",
    "config_from_mapping",
    "load_config",
    "build_integrator",
    "build_adapter",
]
