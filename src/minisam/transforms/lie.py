"""SO(2), SE(2), SO(3) and SE(3) group elements as JAX-friendly objects."""

from __future__ import annotations

from typing import Tuple

import jax
import jax.numpy as jnp
import numpy as np
from jax.tree_util import register_pytree_node_class

from ..utils import complex_to_vector2, vector2_to_complex
from . import se2, se3, so2, so3
from .rotation import (
    normalize_complex,
    normalize_quaternions,
    wxyz_to_xyzw,
)
from .so3 import EPSILON

Array = jax.Array


def _as_array(x) -> Array:
    return jnp.asarray(x, dtype=jnp.float64)


def _check_shape(x: Array, shape: Tuple[int, ...], what: str) -> Array:
    if x.shape != shape:
        raise ValueError(f"{what} must have shape {shape}, got {x.shape}")
    return x


def _check_norm(x: Array, what: str) -> None:
    # Traced values carry no data to check.
    if isinstance(x, jax.core.Tracer):
        return
    if float(jnp.linalg.norm(x)) < EPSILON:
        raise ValueError(f"{what} must have non-zero norm, got {np.asarray(x)}")


def _format(x: Array) -> str:
    return np.array2string(np.asarray(x), precision=6, separator=", ")


class _LieGroup:
    """Operators shared by the group types.

    Subclasses provide ``_compose`` (group product with an element of the same
    type) and ``_act`` (action on (..., point_dim) points).
    """

    DoF: int
    num_parameters: int
    N: int
    point_dim: int

    @classmethod
    def _wrap(cls, *children):
        return cls.tree_unflatten(None, children)

    def __mul__(self, other):
        if isinstance(other, type(self)):
            return self._compose(other)
        if isinstance(other, _LieGroup):
            return NotImplemented
        if not isinstance(other, (jax.Array, np.ndarray, list, tuple)):
            return NotImplemented

        points = _as_array(other)
        if points.ndim == 0 or points.shape[-1] != self.point_dim:
            raise ValueError(
                f"{type(self).__name__} acts on points of shape (..., {self.point_dim}), "
                f"got {points.shape}"
            )
        return self._act(points)

    def __imul__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        # Rebuild the concrete type from the product
        return type(self)(self * other)


@register_pytree_node_class
class SO2(_LieGroup):
    """Rotation in the plane, stored as a unit complex number.

    ``SO2()`` is the identity, ``SO2(theta)`` a rotation by *theta* radians,
    ``SO2(c)`` takes a complex number or an (re, im) pair, ``SO2(R)`` a 2x2
    rotation matrix and ``SO2(other)`` copies. Complex inputs are normalized.
    """

    DoF = 1
    num_parameters = 2
    N = 2
    point_dim = 2

    def __init__(self, *args):
        if not args:
            z = jnp.array([1.0, 0.0])
        elif len(args) == 1:
            z = self._parse(args[0])
        else:
            raise TypeError(f"SO2 takes at most 1 argument, got {len(args)}")
        self._z = z

    @staticmethod
    def _parse(arg) -> Array:
        if isinstance(arg, SO2):
            return arg._z
        if isinstance(arg, (complex, np.complexfloating)):
            arg = complex_to_vector2(arg)
        elif jnp.iscomplexobj(arg):
            if jnp.ndim(arg) != 0:
                raise ValueError(
                    f"SO2 expects a single complex number, got shape {jnp.shape(arg)}"
                )
            arg = complex_to_vector2(arg)

        x = _as_array(arg)
        if x.ndim == 0:
            return so2.exp(x)
        if x.shape == (2,):
            _check_norm(x, "SO2 complex number")
            return normalize_complex(x)
        if x.shape == (2, 2):
            return so2.from_matrix(x)
        raise ValueError(
            f"SO2 expects an angle, a complex number or a 2x2 matrix, got shape {x.shape}"
        )

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self._z,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        obj = object.__new__(cls)
        (obj._z,) = children
        return obj

    # Lie group
    def log(self) -> Array:
        """Rotation angle in (-pi, pi]."""
        return so2.log(self._z)

    @staticmethod
    def exp(theta) -> SO2:
        theta = _check_shape(_as_array(theta), (), "SO2 tangent")
        return SO2._wrap(so2.exp(theta))

    @staticmethod
    def hat(theta) -> Array:
        return so2.hat(_check_shape(_as_array(theta), (), "SO2 tangent"))

    @staticmethod
    def vee(omega) -> Array:
        return so2.vee(_check_shape(_as_array(omega), (2, 2), "so(2) matrix"))

    def inverse(self) -> SO2:
        return SO2._wrap(so2.inverse(self._z))

    def params(self) -> Array:
        """(re, im) of the unit complex number."""
        return self._z

    def matrix(self) -> Array:
        return so2.to_matrix(self._z)

    def Adj(self) -> Array:
        # SO(2) is commutative
        return jnp.ones((), dtype=self._z.dtype)

    def _compose(self, other: SO2) -> SO2:
        return SO2._wrap(so2.multiply(self._z, other._z))

    def _act(self, points: Array) -> Array:
        return so2.apply(self._z, points)

    # SO(2) specific
    def theta(self) -> Array:
        return self.log()

    def unit_complex(self) -> complex:
        return vector2_to_complex(self._z)

    def __repr__(self) -> str:
        return f"SO2(unit_complex={_format(self._z)})"


@register_pytree_node_class
class SE2(_LieGroup):
    """Rigid transform in the plane.

    ``SE2()`` is the identity, ``SE2(rotation, translation)`` takes an SO2 (or
    anything SO2 accepts) and a 2-vector, ``SE2(T)`` a 3x3 homogeneous matrix.
    Tangent vectors are ordered (v1, v2, theta).
    """

    DoF = 3
    num_parameters = 4
    N = 3
    point_dim = 2

    def __init__(self, *args):
        if not args:
            rotation, translation = SO2(), jnp.zeros(2)
        elif len(args) == 1 and isinstance(args[0], SE2):
            rotation, translation = args[0]._so2, args[0]._translation
        elif len(args) == 1:
            T = _check_shape(_as_array(args[0]), (3, 3), "SE2 matrix")
            z, translation = se2.from_matrix(T)
            rotation = SO2._wrap(z)
        elif len(args) == 2:
            rotation = args[0] if isinstance(args[0], SO2) else SO2(args[0])
            translation = _check_shape(_as_array(args[1]), (2,), "SE2 translation")
        else:
            raise TypeError(f"SE2 takes at most 2 arguments, got {len(args)}")
        self._so2 = rotation
        self._translation = translation

    def tree_flatten(self):
        return (self._so2, self._translation), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        obj = object.__new__(cls)
        obj._so2, obj._translation = children
        return obj

    @classmethod
    def _from_parts(cls, z: Array, t: Array) -> SE2:
        return cls._wrap(SO2._wrap(z), t)

    # Builders
    @staticmethod
    def trans(translation) -> SE2:
        return SE2(SO2(), translation)

    @staticmethod
    def transX(x) -> SE2:
        return SE2(SO2(), [x, 0.0])

    @staticmethod
    def transY(y) -> SE2:
        return SE2(SO2(), [0.0, y])

    @staticmethod
    def rot(theta) -> SE2:
        return SE2(SO2.exp(theta), jnp.zeros(2))

    # Lie group
    def log(self) -> Array:
        return se2.log(self._so2.params(), self._translation)

    @staticmethod
    def exp(xi) -> SE2:
        xi = _check_shape(_as_array(xi), (3,), "SE2 tangent")
        return SE2._from_parts(*se2.exp(xi))

    @staticmethod
    def hat(xi) -> Array:
        return se2.hat(_check_shape(_as_array(xi), (3,), "SE2 tangent"))

    @staticmethod
    def vee(omega) -> Array:
        return se2.vee(_check_shape(_as_array(omega), (3, 3), "se(2) matrix"))

    def inverse(self) -> SE2:
        return SE2._from_parts(*se2.inverse(self._so2.params(), self._translation))

    def params(self) -> Array:
        """(re, im, tx, ty)."""
        return jnp.concatenate([self._so2.params(), self._translation])

    def matrix(self) -> Array:
        return se2.to_matrix(self._so2.params(), self._translation)

    def Adj(self) -> Array:
        return se2.adjoint(self._so2.params(), self._translation)

    def _compose(self, other: SE2) -> SE2:
        return SE2._from_parts(*se2.multiply(
            self._so2.params(), self._translation, other._so2.params(), other._translation
        ))

    def _act(self, points: Array) -> Array:
        return se2.apply(self._so2.params(), self._translation, points)

    # Components, returned as copies
    def so2(self) -> SO2:
        return SO2(self._so2)

    def translation(self) -> Array:
        return jnp.array(self._translation)

    def __repr__(self) -> str:
        return f"SE2(so2={self._so2!r}, translation={_format(self._translation)})"


@register_pytree_node_class
class SO3(_LieGroup):
    """3D rotation, stored as a (w, x, y, z) unit quaternion.

    ``SO3()`` is the identity, ``SO3(R)`` takes a 3x3 rotation matrix and
    ``SO3(x, y, z, w)`` quaternion coefficients in Eigen order, vector part
    first. Quaternions are normalized on construction.
    """

    DoF = 3
    num_parameters = 4
    N = 3
    point_dim = 3

    def __init__(self, *args):
        if not args:
            q = jnp.array([1.0, 0.0, 0.0, 0.0])
        elif len(args) == 1 and isinstance(args[0], SO3):
            q = args[0]._q
        elif len(args) == 1:
            R = _check_shape(_as_array(args[0]), (3, 3), "SO3 matrix")
            q = so3.from_matrix(R)
        elif len(args) == 4:
            x, y, z, w = args
            q = _as_array([w, x, y, z])
            _check_norm(q, "SO3 quaternion")
            q = normalize_quaternions(q)
        else:
            raise TypeError(f"SO3 takes 0, 1 or 4 arguments, got {len(args)}")
        self._q = q

    def tree_flatten(self):
        return (self._q,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        obj = object.__new__(cls)
        (obj._q,) = children
        return obj

    # Builders
    @staticmethod
    def rotX(angle) -> SO3:
        return SO3.exp([angle, 0.0, 0.0])

    @staticmethod
    def rotY(angle) -> SO3:
        return SO3.exp([0.0, angle, 0.0])

    @staticmethod
    def rotZ(angle) -> SO3:
        return SO3.exp([0.0, 0.0, angle])

    # Lie group
    def log(self) -> Array:
        return so3.log(self._q)

    @staticmethod
    def exp(omega) -> SO3:
        omega = _check_shape(_as_array(omega), (3,), "SO3 tangent")
        return SO3._wrap(so3.exp(omega))

    @staticmethod
    def hat(omega) -> Array:
        return so3.hat(_check_shape(_as_array(omega), (3,), "SO3 tangent"))

    @staticmethod
    def vee(omega) -> Array:
        return so3.vee(_check_shape(_as_array(omega), (3, 3), "so(3) matrix"))

    def inverse(self) -> SO3:
        return SO3._wrap(so3.inverse(self._q))

    def params(self) -> Array:
        """Quaternion coefficients (x, y, z, w)."""
        return wxyz_to_xyzw(self._q)

    def matrix(self) -> Array:
        return so3.to_matrix(self._q)

    def Adj(self) -> Array:
        return self.matrix()

    def _compose(self, other: SO3) -> SO3:
        return SO3._wrap(so3.multiply(self._q, other._q))

    def _act(self, points: Array) -> Array:
        return so3.apply(self._q, points)

    # SO(3) specific
    def unit_quaternion(self) -> Array:
        """Quaternion coefficients (x, y, z, w)."""
        return wxyz_to_xyzw(self._q)

    def __repr__(self) -> str:
        return f"SO3(unit_quaternion={_format(self.unit_quaternion())})"


@register_pytree_node_class
class SE3(_LieGroup):
    """Rigid transform in 3D.

    ``SE3()`` is the identity, ``SE3(rotation, translation)`` takes an SO3 (or
    a 3x3 rotation matrix) and a 3-vector, ``SE3(T)`` a 4x4 homogeneous matrix.
    Twists are ordered (v1, v2, v3, w1, w2, w3).
    """

    DoF = 6
    num_parameters = 7
    N = 4
    point_dim = 3

    def __init__(self, *args):
        if not args:
            rotation, translation = SO3(), jnp.zeros(3)
        elif len(args) == 1 and isinstance(args[0], SE3):
            rotation, translation = args[0]._so3, args[0]._translation
        elif len(args) == 1:
            T = _check_shape(_as_array(args[0]), (4, 4), "SE3 matrix")
            q, translation = se3.from_matrix(T)
            rotation = SO3._wrap(q)
        elif len(args) == 2:
            rotation = args[0] if isinstance(args[0], SO3) else SO3(args[0])
            translation = _check_shape(_as_array(args[1]), (3,), "SE3 translation")
        else:
            raise TypeError(f"SE3 takes at most 2 arguments, got {len(args)}")
        self._so3 = rotation
        self._translation = translation

    def tree_flatten(self):
        return (self._so3, self._translation), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        obj = object.__new__(cls)
        obj._so3, obj._translation = children
        return obj

    @classmethod
    def _from_parts(cls, q: Array, t: Array) -> SE3:
        return cls._wrap(SO3._wrap(q), t)

    # Builders
    @staticmethod
    def trans(translation) -> SE3:
        return SE3(SO3(), translation)

    @staticmethod
    def transX(x) -> SE3:
        return SE3(SO3(), [x, 0.0, 0.0])

    @staticmethod
    def transY(y) -> SE3:
        return SE3(SO3(), [0.0, y, 0.0])

    @staticmethod
    def transZ(z) -> SE3:
        return SE3(SO3(), [0.0, 0.0, z])

    @staticmethod
    def rotX(angle) -> SE3:
        return SE3(SO3.rotX(angle), jnp.zeros(3))

    @staticmethod
    def rotY(angle) -> SE3:
        return SE3(SO3.rotY(angle), jnp.zeros(3))

    @staticmethod
    def rotZ(angle) -> SE3:
        return SE3(SO3.rotZ(angle), jnp.zeros(3))

    # Lie group
    def log(self) -> Array:
        return se3.log(self._so3._q, self._translation)

    @staticmethod
    def exp(twist) -> SE3:
        twist = _check_shape(_as_array(twist), (6,), "SE3 tangent")
        return SE3._from_parts(*se3.exp(twist))

    @staticmethod
    def hat(twist) -> Array:
        return se3.hat(_check_shape(_as_array(twist), (6,), "SE3 tangent"))

    @staticmethod
    def vee(omega) -> Array:
        return se3.vee(_check_shape(_as_array(omega), (4, 4), "se(3) matrix"))

    def inverse(self) -> SE3:
        return SE3._from_parts(*se3.inverse(self._so3._q, self._translation))

    def params(self) -> Array:
        """(qx, qy, qz, qw, tx, ty, tz)."""
        return jnp.concatenate([self._so3.params(), self._translation])

    def matrix(self) -> Array:
        return se3.to_matrix(self._so3._q, self._translation)

    def Adj(self) -> Array:
        return se3.adjoint(self._so3._q, self._translation)

    def _compose(self, other: SE3) -> SE3:
        return SE3._from_parts(*se3.multiply(
            self._so3._q, self._translation, other._so3._q, other._translation
        ))

    def _act(self, points: Array) -> Array:
        return se3.apply(self._so3._q, self._translation, points)

    # Components, returned as copies
    def so3(self) -> SO3:
        return SO3(self._so3)

    def translation(self) -> Array:
        return jnp.array(self._translation)

    def __repr__(self) -> str:
        return f"SE3(so3={self._so3!r}, translation={_format(self._translation)})"
