"""
Configuration dataclasses for the residual tooling.
All default tolerances live here.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class GradientCheckConfig:
    """
    Parameters for comparing autodiff Jacobians with central differences.

    Entry (i, j) passes when
        |J_auto - J_num| <= absolute_tolerance + relative_tolerance * max(|J_auto|, |J_num|)
    """
    relative_step: float = 1e-6            # Step h = relative_step * max(|x|, 1)
    relative_tolerance: float = 1e-4
    absolute_tolerance: float = 1e-6       # Floor for entries that are (near) zero
    verbose: bool = False                  # Per-block DEBUG report; otherwise mismatches only

    def __post_init__(self):
        if self.relative_step <= 0:
            raise ValueError(f"relative_step must be > 0, got {self.relative_step}")
        if self.relative_tolerance < 0 or self.absolute_tolerance < 0:
            raise ValueError("Tolerances must be non-negative.")


def get_default_gradient_check_config() -> GradientCheckConfig:
    return GradientCheckConfig()


__all__ = ["GradientCheckConfig", "get_default_gradient_check_config"]
