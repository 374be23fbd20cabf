"""
minisam: Lie group geometry for factor-graph optimization.

This library provides SO(2), SE(2), SO(3) and SE(3) group elements with
exponential/logarithm maps, hat/vee, adjoints and group actions, implemented
with JAX, and the extension points through which the rest of the
factor-graph suite is registered.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import extensions
from . import transforms
from . import utils
from ._minisam import SE2, SE3, SO2, SO3, __version__

__all__ = ["SO2", "SE2", "SO3", "SE3", "extensions", "transforms", "utils"]
