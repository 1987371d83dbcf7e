"""
Closed track geometry and arc-length queries
"""

import math
import numbers
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.integrate import quad

from saferails.errors import InvalidGeometry, InvalidInput
from saferails.separation import wrap

Point = Tuple[float, float]
BezierSegment = Tuple[Point, Point, Point, Point]

# Demo loop in drawing units (1000 x 600 canvas), drawn as six cubic segments
# from Central out past Midtown to Harbor and back
DEMO_LOOP: Tuple[BezierSegment, ...] = (
    ((100, 480), (220, 420), (360, 500), (480, 360)),
    ((480, 360), (560, 260), (720, 240), (860, 160)),
    ((860, 160), (920, 120), (940, 80), (980, 60)),
    ((980, 60), (940, 110), (860, 140), (780, 160)),
    ((780, 160), (640, 200), (560, 220), (480, 300)),
    ((480, 300), (360, 420), (220, 340), (100, 480)),
)
DEMO_TRACK_LENGTH_M = 1000.0


def _check_length(length: float, what: str) -> float:
    if (
        not isinstance(length, numbers.Real)
        or isinstance(length, bool)
        or not math.isfinite(length)
        or length <= 0
    ):
        raise InvalidGeometry(f"{what} must be a positive finite length, got {length}")
    return float(length)


def bezier_point(segment: BezierSegment, t: np.ndarray) -> np.ndarray:
    """Evaluate a cubic Bezier segment at parameter values t, returning [len(t) x 2]"""
    p0, p1, p2, p3 = (np.asarray(p, dtype=float) for p in segment)
    t = np.asarray(t, dtype=float)[:, None]
    u = 1.0 - t
    return u**3 * p0 + 3 * u**2 * t * p1 + 3 * u * t**2 * p2 + t**3 * p3


def bezier_length(segment: BezierSegment) -> float:
    """Arc length of a cubic Bezier segment, integrating |B'(t)| over [0, 1]"""
    p0, p1, p2, p3 = (np.asarray(p, dtype=float) for p in segment)
    d0, d1, d2 = 3 * (p1 - p0), 3 * (p2 - p1), 3 * (p3 - p2)

    def speed(t: float) -> float:
        u = 1.0 - t
        return float(np.hypot(*(u * u * d0 + 2 * u * t * d1 + t * t * d2)))

    length, _ = quad(speed, 0.0, 1.0, limit=100)
    return length


class Track:
    """
    Closed 1-D track parameterized by fraction in [0, 1)

    A track always has a metric ``total_length``. It may also carry a sampled
    curve in drawing coordinates, which is only needed for point and heading
    lookups by a renderer.
    """

    def __init__(
        self,
        total_length: float,
        points: Optional[np.ndarray] = None,
        curve_length: Optional[float] = None,
    ) -> None:
        """
        Initialize track

        Args:
            total_length: Track length in metres
            points: Optional closed polyline [N x 2] sampling the curve
            curve_length: Length of the curve in drawing units (defaults to
                the polyline length)
        """
        self._total_length = _check_length(total_length, "total_length")
        self._points = None
        self._cumulative = None
        self._curve_length = None

        if points is not None:
            pts = np.array(points, dtype=float)
            if pts.ndim != 2 or pts.shape[1] != 2 or len(pts) < 2:
                raise InvalidGeometry("points must be an [N x 2] array with N >= 2")
            if not np.all(np.isfinite(pts)):
                raise InvalidGeometry("points contain non-finite coordinates")
            if not np.allclose(pts[0], pts[-1]):
                pts = np.vstack([pts, pts[:1]])

            seg = np.hypot(*np.diff(pts, axis=0).T)
            cumulative = np.concatenate([[0.0], np.cumsum(seg)])
            polyline_length = _check_length(float(cumulative[-1]), "curve")
            self._curve_length = _check_length(
                polyline_length if curve_length is None else curve_length, "curve_length"
            )
            self._cumulative = cumulative / polyline_length
            self._points = pts
            self._points.flags.writeable = False
            self._cumulative.flags.writeable = False

    @classmethod
    def from_points(
        cls, points: Sequence[Point], total_length_m: Optional[float] = None
    ) -> "Track":
        """Build a track from a polyline; the loop is closed automatically"""
        pts = np.asarray(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2 or len(pts) < 2:
            raise InvalidGeometry("points must be an [N x 2] array with N >= 2")
        closed = pts if np.allclose(pts[0], pts[-1]) else np.vstack([pts, pts[:1]])
        length = float(np.sum(np.hypot(*np.diff(closed, axis=0).T)))
        _check_length(length, "curve")
        return cls(length if total_length_m is None else total_length_m, points=closed)

    @classmethod
    def from_cubic_bezier(
        cls,
        segments: Sequence[BezierSegment],
        total_length_m: Optional[float] = None,
        samples_per_segment: int = 64,
    ) -> "Track":
        """
        Build a track from consecutive cubic Bezier segments

        Args:
            segments: Control points (p0, p1, p2, p3) per segment
            total_length_m: Metric length the curve represents; defaults to
                the curve length in drawing units
            samples_per_segment: Polyline samples used for point lookups

        Returns:
            Track whose curve length is the integrated Bezier arc length
        """
        if not segments:
            raise InvalidGeometry("at least one segment is required")

        lengths = [bezier_length(s) for s in segments]
        curve_length = float(sum(lengths))
        _check_length(curve_length, "curve")

        t = np.linspace(0.0, 1.0, samples_per_segment, endpoint=False)
        pts = np.vstack([bezier_point(s, t) for s in segments] + [np.asarray([segments[-1][3]], dtype=float)])
        return cls(
            curve_length if total_length_m is None else total_length_m,
            points=pts,
            curve_length=curve_length,
        )

    @property
    def total_length(self) -> float:
        """Metric length of the loop (m)"""
        return self._total_length

    @property
    def curve_length(self) -> Optional[float]:
        """Length of the drawn curve in drawing units, if the track has one"""
        return self._curve_length

    @property
    def has_curve(self) -> bool:
        return self._points is not None

    @property
    def points(self) -> Optional[np.ndarray]:
        return self._points

    def metric_distance(self, fraction_delta: float) -> float:
        """
        Convert a fractional arc-length difference into metres

        Args:
            fraction_delta: Fraction of the loop, in [0, 1]

        Returns:
            Distance in metres
        """
        if (
            not isinstance(fraction_delta, numbers.Real)
            or isinstance(fraction_delta, bool)
            or not math.isfinite(fraction_delta)
            or not 0.0 <= fraction_delta <= 1.0
        ):
            raise InvalidInput(f"fraction_delta must be in [0, 1], got {fraction_delta}")
        return fraction_delta * self._total_length

    def point_at(self, fraction: float) -> Point:
        """Drawing coordinates of the point at a fractional position"""
        if self._points is None:
            raise InvalidGeometry("track has no curve geometry")
        s = wrap(fraction)
        x = float(np.interp(s, self._cumulative, self._points[:, 0]))
        y = float(np.interp(s, self._cumulative, self._points[:, 1]))
        return x, y

    def heading_at(self, fraction: float, look_ahead: float = 5.0) -> float:
        """
        Tangent direction at a fractional position, in degrees

        Args:
            fraction: Position along the loop
            look_ahead: Distance ahead along the curve (drawing units) used
                to estimate the tangent

        Returns:
            Angle from the +x axis in degrees
        """
        if self._points is None:
            raise InvalidGeometry("track has no curve geometry")
        x0, y0 = self.point_at(fraction)
        x1, y1 = self.point_at(fraction + look_ahead / self._curve_length)
        return math.degrees(math.atan2(y1 - y0, x1 - x0))

    def __repr__(self) -> str:
        return f"Track(total_length={self._total_length!r}, has_curve={self.has_curve})"


def demo_track(total_length_m: float = DEMO_TRACK_LENGTH_M) -> Track:
    """The Central-Midtown-Harbor demo loop, mapped onto 1000 m by default"""
    return Track.from_cubic_bezier(DEMO_LOOP, total_length_m=total_length_m)
