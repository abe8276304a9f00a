"""Tests for validity checks and the termination flag."""

import math

import pytest
import torch

from hmc_kernel.termination import combine, is_terminated, is_valid, termination, value_termination
from hmc_kernel.device import available_devices


DEVICES = available_devices()


class TestValidity:

    @pytest.mark.parametrize("device", DEVICES)
    def test_finite_vector_is_valid(self, device):
        assert is_valid(torch.tensor([0.0, -1.5, 3e30], device=device))

    @pytest.mark.parametrize("device", DEVICES)
    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf")])
    def test_non_finite_component_is_invalid(self, device, bad):
        v = torch.tensor([1.0, bad, 2.0], device=device)
        assert not is_valid(v)
        assert termination(v)

    def test_accepts_python_sequences(self):
        assert is_valid([1.0, 2.0])
        assert not is_valid([1.0, math.nan])

    def test_explicit_flag(self):
        assert termination(terminated=True)
        assert not termination()


class TestCombine:

    @pytest.mark.parametrize("a, b, expected", [
        (False, False, False),
        (True, False, True),
        (False, True, True),
        (True, True, True),
    ])
    def test_combine_is_monotone(self, a, b, expected):
        assert combine(a, b) is expected

    def test_once_terminated_stays_terminated(self):
        t = False
        for flag in [False, True, False, False]:
            t = combine(t, flag)
        assert is_terminated(t)


class TestValueTermination:

    def test_returns_result_and_flag(self):
        res, t = value_termination(lambda x: 2 * x, torch.tensor([1.0, 2.0]))
        assert torch.equal(res, torch.tensor([2.0, 4.0]))
        assert not t

    def test_flags_non_finite_result(self):
        res, t = value_termination(torch.log, torch.tensor([-1.0]))
        assert torch.isnan(res).all()
        assert t
