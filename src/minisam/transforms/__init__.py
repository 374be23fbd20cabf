"""
JAX-based Lie group transforms.

This module provides JIT-compilable implementations of:
- SO(2) and SE(2) planar rotations and rigid transforms (so2, se2 modules)
- SO(3) rotations and SE(3) rigid body transforms (so3, se3 modules)
- SO2, SE2, SO3 and SE3 group element classes on top of them (lie module)

The functional modules are pure and stateless; the classes are immutable
values registered as JAX pytrees.
"""

from . import so2
from . import se2
from . import so3
from . import se3
from .lie import SE2, SE3, SO2, SO3

__all__ = [
    "so2",
    "se2",
    "so3",
    "se3",
    "SO2",
    "SE2",
    "SO3",
    "SE3",
]
