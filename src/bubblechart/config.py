"""
Configuration & Constants
=========================
This module serves as the central registry for file paths, tuning constants
and the default parameters of the layout engine.

Why is this file needed?
------------------------
1. Abstraction: It keeps the empirically tuned numbers (radius divisor, alpha
   cooling, zoom range) in one place instead of scattering them across the
   solver, the viewport and the view.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (sample datasets) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_DATASET_PATH (str): Absolute path to the bundled sample dataset.
    ScaleConfig, SimulationConfig, ViewportConfig: Default tunables.
"""
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: config.py is in src/bubblechart/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_DATASET_PATH: str = os.path.join(ASSETS_PATH, "sample_bubbles.json")

# Tick cadence of the simulation loop (~60 Hz display refresh)
TICK_INTERVAL_MS: int = 16

# Focal bubble colours, independent of the categorical palette
FOCAL_FILL: str = "#ffffff"
FOCAL_STROKE: str = "#f44336"
FOCAL_TEXT: str = "#f44336"
LABEL_TEXT: str = "#ffffff"

# Maximum number of visible label lines inside a bubble
LABEL_MAX_LINES: int = 4


@dataclass(frozen=True)
class ScaleConfig:
    """Value -> radius mapping parameters."""
    domain: tuple[float, float] = (0.0, 100.0)
    min_radius: float = 10.0
    radius_divisor: float = 4.0  # maxR = min(width, height) / radius_divisor
    radius_floor: float = 1.0
    label_box_ratio: float = 1.8  # label container side relative to the radius


@dataclass(frozen=True)
class SimulationConfig:
    """Force solver parameters (alpha cooling, force strengths)."""
    alpha_start: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 1.0 - 0.001 ** (1.0 / 300.0)
    alpha_target: float = 0.0
    reheat_alpha: float = 0.3
    settle_alpha: float = 0.05
    velocity_decay: float = 0.4

    charge_strength: float = -30.0
    charge_distance_min: float = 1.0
    centering_strength: float = 0.1
    collision_padding: float = 1.0
    collision_iterations: int = 4

    initial_radius: float = 10.0


@dataclass(frozen=True)
class ViewportConfig:
    """Zoom range and zoom step parameters."""
    min_zoom: float = 0.25
    max_zoom: float = 4.0
    zoom_step: float = 1.2
    wheel_base: float = 2.0
    wheel_sensitivity: float = 0.002  # per angle-delta unit (120 per notch)
    reset_duration_ms: int = 300


if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
