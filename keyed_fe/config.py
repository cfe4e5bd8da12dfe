# keyed_fe/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass


@dataclass
class SolverConfig:
    """Numerical tolerances shared by the builders and the solver."""

    # Max condition number of K_FF before the model is reported under-constrained
    cond_limit: float = 1e12

    # Lengths / areas at or below this are treated as degenerate geometry
    geometry_tolerance: float = 1e-12

    # Relative tolerance used when checking element matrices for symmetry
    symmetry_rtol: float = 1e-9
    symmetry_atol: float = 1e-9


# Global config instance
CONFIG = SolverConfig()
