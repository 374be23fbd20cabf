"""Tests for the binding module, its extension points and boundary helpers."""

import types

import jax.numpy as jnp
import numpy as np
import pytest

import minisam
from minisam import _minisam, extensions
from minisam.utils import complex_to_vector2, vector2_to_complex


@pytest.fixture
def empty_registry(monkeypatch):
    """Replace the populator registry with an empty one for the test."""
    registry = {point: [] for point in extensions.EXTENSION_POINTS}
    monkeypatch.setattr(extensions, "_registry", registry)
    return registry


def test_module_presents_group_types():
    """Test the binding module exposes the four group types."""
    for name in ("SO2", "SE2", "SO3", "SE3"):
        assert getattr(_minisam, name) is getattr(minisam, name)


def test_version_attribute():
    """Test __version__ is a non-empty string shared with the package."""
    assert isinstance(_minisam.__version__, str)
    assert _minisam.__version__
    assert minisam.__version__ == _minisam.__version__


def test_utils_extension_populates_module():
    """Test the conversion helpers are registered on the binding module."""
    assert _minisam.complex_to_vector2 is complex_to_vector2
    assert _minisam.vector2_to_complex is vector2_to_complex


def test_extension_point_order():
    """Test the extension points run in declaration order."""
    assert extensions.EXTENSION_POINTS == (
        "core",
        "variables",
        "factor",
        "loss_function",
        "geometry",
        "optimizer",
        "slam",
        "utils",
    )


def test_wrap_all_runs_points_in_order(empty_registry):
    """Test wrap_all visits every point once, in order."""
    visited = []
    for point in reversed(extensions.EXTENSION_POINTS):
        extensions.register(point)(lambda module, point=point: visited.append(point))

    module = types.ModuleType("scratch")
    extensions.wrap_all(module)

    assert visited == list(extensions.EXTENSION_POINTS)


def test_populator_exports_names(empty_registry):
    """Test names returned by a populator are set on the module."""

    @extensions.register("slam")
    def populate(module):
        return {"answer": 42}

    module = types.ModuleType("scratch")
    extensions.wrap_slam(module)

    assert module.answer == 42
    assert empty_registry["slam"] == [populate]


def test_populators_run_in_registration_order(empty_registry):
    """Test several populators of one point run first to last."""
    calls = []
    extensions.register("factor")(lambda module: calls.append("first"))
    extensions.register("factor")(lambda module: calls.append("second"))

    extensions.wrap_factor(types.ModuleType("scratch"))

    assert calls == ["first", "second"]


def test_populator_cannot_overwrite(empty_registry):
    """Test a populator may not shadow an existing module attribute."""
    extensions.register("core")(lambda module: {"SO2": object()})

    module = types.ModuleType("scratch")
    module.SO2 = minisam.SO2

    with pytest.raises(ValueError, match="cannot overwrite"):
        extensions.wrap_core(module)
    assert module.SO2 is minisam.SO2


def test_unknown_extension_point():
    """Test registering on an unknown point raises."""
    with pytest.raises(ValueError, match="Unknown extension point"):
        extensions.register("renderer")
    with pytest.raises(ValueError):
        extensions.wrap("renderer", types.ModuleType("scratch"))


def test_complex_to_vector2():
    """Test complex numbers convert to (re, im) arrays."""
    np.testing.assert_array_equal(complex_to_vector2(1 + 2j), jnp.array([1.0, 2.0]))
    np.testing.assert_array_equal(complex_to_vector2(3.0), jnp.array([3.0, 0.0]))


def test_vector2_to_complex():
    """Test (re, im) arrays convert to complex numbers."""
    assert vector2_to_complex(jnp.array([3.0, -4.0])) == 3 - 4j
    assert vector2_to_complex([0.5, 0.25]) == 0.5 + 0.25j
    with pytest.raises(ValueError):
        vector2_to_complex(jnp.zeros(3))
