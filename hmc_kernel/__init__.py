"""Leapfrog integration and step-size adaptation for Hamiltonian Monte Carlo."""

from .device import get_device, to_device, available_devices
from .termination import is_valid, termination, is_terminated, combine, value_termination
from .hamiltonians import EnergyModel, Potential, Harmonic, Gaussian, DoubleWell, LogDensity, Hamiltonian
from .integrators import PhaseState, Leapfrog, momentum_update, position_update
from .adaptation import (
    FixedStepSize, ManualStepSizeAdapter, DualAveragingState, DualAveraging,
    StepSizeAdapter, current_step_size, adapt,
)

__version__ = "0.1.0"
__all__ = [
    # Device
    "get_device", "to_device", "available_devices",
    # Termination
    "is_valid", "termination", "is_terminated", "combine", "value_termination",
    # Energy models
    "EnergyModel", "Potential", "Harmonic", "Gaussian", "DoubleWell", "LogDensity", "Hamiltonian",
    # Integrators
    "PhaseState", "Leapfrog", "momentum_update", "position_update",
    # Adaptation
    "FixedStepSize", "ManualStepSizeAdapter", "DualAveragingState", "DualAveraging",
    "StepSizeAdapter", "current_step_size", "adapt",
]
