from .field import (
    CircularGVF,
    ClosedPathGVF,
    FollowableGVF,
    GuidingVectorField,
    PathGVF,
    Phi,
    Query,
    VectorField,
)
from .obstacle import CompositeGVF, GVFObstacle, default_map_function

__all__ = [
    "VectorField",
    "GuidingVectorField",
    "FollowableGVF",
    "Query",
    "Phi",
    "PathGVF",
    "CircularGVF",
    "ClosedPathGVF",
    "GVFObstacle",
    "CompositeGVF",
    "default_map_function",
]
