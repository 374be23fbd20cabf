"""Conversions between 2-vectors and complex numbers.

SO(2) elements cross the Python boundary as complex numbers; internally
they are (re, im) arrays.
"""

import jax
import jax.numpy as jnp

from .extensions import register

Array = jax.Array


def complex_to_vector2(c: complex) -> Array:
    """(re, im) array of a complex number."""
    c = complex(c)
    return jnp.array([c.real, c.imag])


def vector2_to_complex(v) -> complex:
    """Complex number of a (2,) array."""
    v = jnp.asarray(v)
    if v.shape != (2,):
        raise ValueError(f"expected a vector of shape (2,), got {v.shape}")
    return complex(float(v[0]), float(v[1]))


@register("utils")
def _export_conversions(module):
    return {
        "complex_to_vector2": complex_to_vector2,
        "vector2_to_complex": vector2_to_complex,
    }
