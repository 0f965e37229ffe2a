"""Size bucket conversions between calendar durations and issue points."""

from __future__ import annotations

from typing import Final

from .enums import SizeBucket

DEFAULT_BUCKET: Final[SizeBucket] = SizeBucket.S

BUCKET_MINUTES: Final[dict[SizeBucket, int]] = {
    SizeBucket.XS: 15,
    SizeBucket.S: 30,
    SizeBucket.M: 60,
    SizeBucket.L: 120,
    SizeBucket.XL: 240,
}

BUCKET_POINTS: Final[dict[SizeBucket, int]] = {
    SizeBucket.XS: 1,
    SizeBucket.S: 2,
    SizeBucket.M: 3,
    SizeBucket.L: 5,
    SizeBucket.XL: 8,
}

_POINTS_BUCKET: Final[dict[int, SizeBucket]] = {
    points: bucket for bucket, points in BUCKET_POINTS.items()
}

# Inclusive upper bounds, checked in order.
_DURATION_THRESHOLDS: Final[tuple[tuple[int, SizeBucket], ...]] = (
    (22, SizeBucket.XS),
    (45, SizeBucket.S),
    (90, SizeBucket.M),
    (180, SizeBucket.L),
)


def bucket_for_duration(minutes: float) -> SizeBucket:
    for upper, bucket in _DURATION_THRESHOLDS:
        if minutes <= upper:
            return bucket
    return SizeBucket.XL


def bucket_for_points(points: int | None) -> SizeBucket:
    if points is None:
        return DEFAULT_BUCKET
    return _POINTS_BUCKET.get(points, DEFAULT_BUCKET)


def minutes_for_bucket(bucket: SizeBucket) -> int:
    return BUCKET_MINUTES[bucket]


def points_for_bucket(bucket: SizeBucket) -> int:
    return BUCKET_POINTS[bucket]
