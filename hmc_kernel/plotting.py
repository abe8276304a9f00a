"""Shared plotting utilities for hmc-kernel demos.

Provides consistent Nord-inspired, editorial styling across all scripts.
"""

import os

import matplotlib.pyplot as plt


FIG_WIDTH_DOUBLE = 6.75
GOLDEN_RATIO = (5**0.5 - 1) / 2

PLOT_STYLE = {
    "font.family": "monospace",
    "font.monospace": ["JetBrains Mono", "DejaVu Sans Mono", "Menlo", "Monaco"],
    "font.size": 9,
    "axes.titlesize": 10,
    "axes.labelsize": 9,
    "xtick.labelsize": 8,
    "ytick.labelsize": 8,
    "legend.fontsize": 8,
    "axes.grid": True,
    "grid.alpha": 0.2,
    "grid.linewidth": 0.5,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "legend.frameon": True,
    "legend.framealpha": 0.95,
    "legend.edgecolor": "0.9",
    "figure.facecolor": "#FAFBFC",
    "axes.facecolor": "#FFFFFF",
    "savefig.facecolor": "#FAFBFC",
    "lines.linewidth": 1.5,
}

COLORS = {
    "step_size": "#5E81AC",
    "averaged": "#D08770",
    "accept": "#A3BE8C",
    "target": "#BF616A",
}


def apply_style():
    """Apply the shared plotting style to matplotlib."""
    plt.rcParams.update(PLOT_STYLE)


def get_figsize(width, nrows=1, ncols=1, aspect=None):
    """(width, height) in inches for a subplot grid of the given width."""
    if aspect is None:
        aspect = GOLDEN_RATIO
    return (width, width * (nrows / ncols) * aspect)


def get_assets_dir():
    """Assets directory next to the package, created if missing."""
    path = os.path.join(os.path.dirname(__file__), "..", "assets")
    os.makedirs(path, exist_ok=True)
    return path
