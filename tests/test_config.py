"""Tests for configuration loading and factories."""

import logging

import pytest
import torch
from rich.logging import RichHandler

from hmc_kernel.adaptation import DualAveraging, FixedStepSize, ManualStepSizeAdapter
from hmc_kernel.config import (
    HMCConfig, IntegratorConfig, StepSizeConfig,
    build_adapter, build_integrator, config_from_mapping, load_config,
)
from hmc_kernel.device import available_devices, get_device, to_device
from hmc_kernel.integrators import Leapfrog, PhaseState
from hmc_kernel.utils.logging import setup_logging


CONFIG_YAML = """\
integrator:
  step_size: 0.05
  n_steps: 20
step_size:
  kind: dual_averaging
  initial_step_size: 0.5
  target_accept: 0.65
  kappa: 0.6
logging:
  level: DEBUG
  rich_tracebacks: false
"""


class TestConfig:

    def test_load_yaml_config(self, tmp_path):
        path = tmp_path / "hmc.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")
        cfg = load_config(path)
        assert cfg.integrator == IntegratorConfig(step_size=0.05, n_steps=20)
        assert cfg.step_size.kind == "dual_averaging"
        assert cfg.step_size.target_accept == 0.65
        assert cfg.step_size.kappa == 0.6
        # Unspecified hyper-parameters keep their defaults.
        assert cfg.step_size.gamma == 0.05
        assert cfg.step_size.t0 == 10.0
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.rich_tracebacks is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == HMCConfig()

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            config_from_mapping({"step_size": {"kind": "adam"}})

    @pytest.mark.parametrize("kind, cls", [
        ("fixed", FixedStepSize),
        ("manual", ManualStepSizeAdapter),
        ("dual_averaging", DualAveraging),
    ])
    def test_build_adapter(self, kind, cls):
        adapter = build_adapter(StepSizeConfig(kind=kind, initial_step_size=0.3))
        assert isinstance(adapter, cls)
        assert adapter.current_step_size() == 0.3

    def test_build_dual_averaging_hyperparameters(self):
        cfg = StepSizeConfig(kind="dual_averaging", initial_step_size=0.3,
                             target_accept=0.9, gamma=0.1, t0=3.0, kappa=0.5)
        da = build_adapter(cfg)
        assert (da.gamma, da.t0, da.kappa, da.delta) == (0.1, 3.0, 0.5, 0.9)

    def test_build_adapter_unknown(self):
        with pytest.raises(ValueError):
            build_adapter(StepSizeConfig(kind="nope"))

    def test_build_integrator(self):
        lf = build_integrator(IntegratorConfig(step_size=0.2, n_steps=5))
        assert lf == Leapfrog(step_size=0.2)
        with pytest.raises(ValueError):
            build_integrator(IntegratorConfig(step_size=0.2, n_steps=0))


class TestConfigDrivenRun:

    def test_trajectory_and_logging_from_yaml(self, tmp_path):
        """Integrator, step count, adapter and logging all come from the file."""
        path = tmp_path / "hmc.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")
        cfg = load_config(path)

        root = logging.getLogger()
        old_level = root.level
        handler = setup_logging(level=cfg.logging.level, rich_tracebacks=cfg.logging.rich_tracebacks)
        try:
            assert root.level == logging.DEBUG
            assert handler.rich_tracebacks is False

            class Oscillator:
                calls = 0

                def grad_position(self, theta):
                    return theta

                def grad_momentum(self, r):
                    Oscillator.calls += 1
                    return r

            adapter = build_adapter(cfg.step_size)
            lf = build_integrator(cfg.integrator)
            assert lf.step_size == 0.05
            lf = lf.with_step_size(adapter.current_step_size())
            x = torch.ones(2, dtype=torch.float64)
            _, _, success = lf.step(Oscillator(), x, x, n_steps=cfg.integrator.n_steps)
            assert success
            assert Oscillator.calls == 20
            assert lf.step_size == 0.5
        finally:
            root.removeHandler(handler)
            root.setLevel(old_level)


class TestLogging:

    def test_setup_logging_installs_rich_handler(self):
        root = logging.getLogger()
        old_level = root.level
        handler = setup_logging("debug", rich_tracebacks=False)
        try:
            assert isinstance(handler, RichHandler)
            assert handler in root.handlers
            assert root.level == logging.DEBUG
        finally:
            root.removeHandler(handler)
            root.setLevel(old_level)


class TestDevice:

    def test_cpu_always_available(self):
        assert "cpu" in available_devices()
        assert "mps" not in available_devices(torch.float64)
        assert get_device("cpu") == torch.device("cpu")

    def test_unknown_preference(self):
        with pytest.raises(ValueError):
            get_device("tpu")

    def test_to_device_phase_state(self):
        state = PhaseState(theta=torch.zeros(2), r=torch.ones(2))
        moved = to_device(state, "cpu")
        assert isinstance(moved, PhaseState)
        assert moved.theta.device.type == "cpu"
        assert torch.equal(moved.r, state.r)
