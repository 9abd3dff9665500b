"""
Point batch conversion helpers
"""

from typing import Sequence

import numpy as np

from d300.lidar_driver import AngledScanLine


def scan_to_array(points: Sequence[AngledScanLine]) -> np.ndarray:
    """Convert points to an (N, 3) array of angle, distance, intensity"""
    if not points:
        return np.empty((0, 3), dtype=np.float64)

    return np.array(
        [(p.angle, p.distance, p.intensity) for p in points],
        dtype=np.float64
    )


def scan_to_cartesian(points: Sequence[AngledScanLine]) -> np.ndarray:
    """
    Project points onto the sensor plane.

    Returns an (N, 2) array of x, y in the distance unit (mm),
    with 0 degrees along +x.
    """
    data = scan_to_array(points)
    radians = np.radians(data[:, 0])
    distance = data[:, 1]
    return np.column_stack((distance * np.cos(radians), distance * np.sin(radians)))
