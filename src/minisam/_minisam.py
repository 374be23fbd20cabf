"""The minisam binding module.

Presents the SO2, SE2, SO3 and SE3 group types and is populated further by
the extension points in :mod:`minisam.extensions`, in order.
"""

import sys
from importlib.metadata import PackageNotFoundError, version

from . import extensions
from .transforms.lie import SE2, SE3, SO2, SO3

try:
    __version__ = version("minisam")
except PackageNotFoundError:
    # Running from a source tree
    __version__ = "dev"

extensions.wrap_all(sys.modules[__name__])
