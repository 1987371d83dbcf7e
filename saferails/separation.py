"""
Position wrapping and shortest-arc separation on a closed track
"""

from typing import Mapping, Optional, Sequence, Tuple

import numpy as np

from saferails.state import AgentId


def wrap(x: float) -> float:
    """
    Normalize a fractional position onto [0, 1)

    Floored modulo handles negative positions; tiny negative inputs round
    up to exactly 1.0, which is folded back to 0.
    """
    r = x % 1.0
    return 0.0 if r >= 1.0 else r


def shortest_arc_distance(f1: float, f2: float) -> float:
    """
    Shortest fractional distance between two positions on a closed loop

    Args:
        f1: First position (fraction in [0, 1))
        f2: Second position (fraction in [0, 1))

    Returns:
        The smaller of the direct and wraparound gaps, in [0, 0.5]
    """
    a = abs(f1 - f2)
    return min(a, 1.0 - a)


def pairwise_arc_distances(fractions: Sequence[float]) -> np.ndarray:
    """Symmetric N x N matrix of shortest-arc distances"""
    f = np.asarray(fractions, dtype=float)
    direct = np.abs(f[:, None] - f[None, :])
    return np.minimum(direct, 1.0 - direct)


def closest_pair(
    positions: Mapping[AgentId, float]
) -> Tuple[Optional[Tuple[AgentId, AgentId]], float]:
    """
    Find the unordered pair of agents with the smallest arc separation

    Ties resolve to the first pair in insertion order, so results are
    reproducible between runs.

    Args:
        positions: Agent id -> fractional position

    Returns:
        Tuple of (pair, fractional distance); pair is None with fewer
        than two agents
    """
    ids = list(positions)
    if len(ids) < 2:
        return None, float("inf")

    arc = pairwise_arc_distances([positions[i] for i in ids])
    rows, cols = np.triu_indices(len(ids), k=1)
    upper = arc[rows, cols]
    k = int(np.argmin(upper))
    return (ids[rows[k]], ids[cols[k]]), float(upper[k])
