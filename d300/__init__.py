"""
D300 LiDAR Frame Decoder
========================

Decodes the binary frame stream of a rotating D300/LD06-style LiDAR.

Features:
- Frame decoding with header resynchronisation
- Per-point angle interpolation
- Frame, point and full-rotation async streams
"""

from d300.lidar_driver import AngledScanLine, D300Driver, Frame, TransportError
from d300.streams import FrameStream, PointStream, RotationAggregator, frame_sweep

__version__ = "1.0.0"

__all__ = [
    "AngledScanLine",
    "D300Driver",
    "Frame",
    "TransportError",
    "FrameStream",
    "PointStream",
    "RotationAggregator",
    "frame_sweep",
]
