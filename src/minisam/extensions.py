"""Extension points of the ``minisam`` binding module.

The binding module is populated in a fixed order by eight extension points
(core, variables, factor, loss function, geometry, optimizer, slam, utils).
Each point runs the populators registered for it, either in-process with
:func:`register` or through the ``minisam.extensions`` entry-point group,
where the entry-point name is the point name.

A populator receives the module being populated and may return a mapping of
names to set on it. Existing module attributes are never overwritten.
"""

import logging
from importlib.metadata import entry_points
from types import ModuleType
from typing import Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "minisam.extensions"

EXTENSION_POINTS = (
    "core",
    "variables",
    "factor",
    "loss_function",
    "geometry",
    "optimizer",
    "slam",
    "utils",
)

Populator = Callable[[ModuleType], Optional[Mapping[str, object]]]

_registry: Dict[str, List[Populator]] = {point: [] for point in EXTENSION_POINTS}


def _check_point(point: str) -> None:
    if point not in EXTENSION_POINTS:
        raise ValueError(
            f"Unknown extension point '{point}', expected one of {EXTENSION_POINTS}"
        )


def register(point: str) -> Callable[[Populator], Populator]:
    """Decorator registering *populator* on an extension point."""
    _check_point(point)

    def decorator(populator: Populator) -> Populator:
        _registry[point].append(populator)
        return populator

    return decorator


def populators(point: str) -> List[Populator]:
    """All populators of *point*: registered ones first, then entry points."""
    _check_point(point)
    discovered = [ep.load() for ep in entry_points(group=ENTRY_POINT_GROUP, name=point)]
    return list(_registry[point]) + discovered


def wrap(point: str, module: ModuleType) -> None:
    """Run every populator of *point* against *module*."""
    for populator in populators(point):
        logger.debug(
            "Populating %s from %s extension %s",
            module.__name__,
            point,
            getattr(populator, "__qualname__", repr(populator)),
        )
        exported = populator(module) or {}
        for name, value in exported.items():
            if hasattr(module, name):
                raise ValueError(
                    f"Extension point '{point}' cannot overwrite "
                    f"'{module.__name__}.{name}'"
                )
            setattr(module, name, value)


def wrap_core(module: ModuleType) -> None:
    wrap("core", module)


def wrap_variables(module: ModuleType) -> None:
    wrap("variables", module)


def wrap_factor(module: ModuleType) -> None:
    wrap("factor", module)


def wrap_loss_function(module: ModuleType) -> None:
    wrap("loss_function", module)


def wrap_geometry(module: ModuleType) -> None:
    wrap("geometry", module)


def wrap_optimizer(module: ModuleType) -> None:
    wrap("optimizer", module)


def wrap_slam(module: ModuleType) -> None:
    wrap("slam", module)


def wrap_utils(module: ModuleType) -> None:
    wrap("utils", module)


def wrap_all(module: ModuleType) -> None:
    """Populate *module* from all extension points, in order."""
    wrap_core(module)
    wrap_variables(module)
    wrap_factor(module)
    wrap_loss_function(module)
    wrap_geometry(module)
    wrap_optimizer(module)
    wrap_slam(module)
    wrap_utils(module)
