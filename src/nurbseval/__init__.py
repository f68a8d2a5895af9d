"""Public API surface for nurbseval.

Defines package metadata and exported interfaces.
"""

import logging
from typing import Final

# Private API imports (accessible but not in __all__)
from . import (
    _curve_utils,  # noqa: F401
    _nurbs_eval_impl,  # noqa: F401
)

# Public API imports
from .control_points import (
    ControlPoint,
    ControlPointLike,
    Point2,
    Point3,
    Point4,
    normalize_control_point,
    normalize_control_points,
)
from .nurbs_curve import NurbsCurve
from .parametric_curve import (
    ParametricCurve,
    get_bounding_box,
    get_length,
    get_lengths,
    get_points,
    get_spaced_points,
    get_u_to_t_mapping,
    point_at_arc_length,
    tangent_at_arc_length,
)
from .tolerance import (
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
)

# Library logging: records are emitted only if the application configures a handler.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "ControlPoint",
    "ControlPointLike",
    "NurbsCurve",
    "ParametricCurve",
    "Point2",
    "Point3",
    "Point4",
    "__license__",
    "__version__",
    "get_bounding_box",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_length",
    "get_lengths",
    "get_machine_epsilon",
    "get_points",
    "get_spaced_points",
    "get_strict_tolerance",
    "get_u_to_t_mapping",
    "normalize_control_point",
    "normalize_control_points",
    "point_at_arc_length",
    "tangent_at_arc_length",
]
