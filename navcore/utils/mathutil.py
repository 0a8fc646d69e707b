"""
Scalar math helpers shared by the profile generator, vector fields and followers.
"""

import math

from navcore.config import EPSILON


def epsilon_equals(a: float, b: float, eps: float = EPSILON) -> bool:
    """Returns whether two floats are approximately equal (within EPSILON)."""
    return abs(a - b) < eps


def solve_quadratic(a: float, b: float, c: float) -> list[float]:
    """
    Returns the real solutions to a*x^2 + b*x + c.

    A discriminant within EPSILON of zero yields the single repeated root, a
    negative discriminant yields no roots. A zero leading coefficient falls
    back to the linear solution.
    """
    if epsilon_equals(a, 0.0):
        if epsilon_equals(b, 0.0):
            return []
        return [-c / b]
    disc = b * b - 4 * a * c
    if epsilon_equals(disc, 0.0):
        return [-b / (2 * a)]
    if disc > 0.0:
        root = math.sqrt(disc)
        return [(-b + root) / (2 * a), (-b - root) / (2 * a)]
    return []


def smallest_nonnegative_root(a: float, b: float, c: float) -> float:
    """
    Smallest non-negative real root of a*x^2 + b*x + c.

    When no such root exists (negative discriminant, or both roots negative)
    the vertex -b/(2a) clamped at zero is returned, i.e. the closest the
    quadratic gets to a solution.
    """
    roots = [r for r in solve_quadratic(a, b, c) if r >= 0.0]
    if roots:
        return min(roots)
    if epsilon_equals(a, 0.0):
        return 0.0
    return max(0.0, -b / (2 * a))


def wrap(n: float, lo: float, hi: float) -> float:
    """Ensures n lies in [lo, hi) where lo and hi are modularly equivalent."""
    return lo + (n - lo) % (hi - lo)


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def sign(x: float) -> float:
    if x > 0.0:
        return 1.0
    if x < 0.0:
        return -1.0
    return 0.0


def sinc(x: float) -> float:
    # Taylor expansion near zero avoids 0/0
    if epsilon_equals(x, 0.0):
        return 1.0 - x * x / 6.0
    return math.sin(x) / x
