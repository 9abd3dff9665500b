"""
Streaming layers over the D300 frame decoder

- FrameStream: repeated frame decoding until the transport fails
- PointStream: frames flattened into individual points
- RotationAggregator: points batched per completed rotation(s)

All three are async iterators that own their source. A transport failure
ends the iteration quietly; use D300Driver.read_frame() directly when the
error itself matters.
"""

from collections import deque
from typing import List, Optional
import logging

from d300.lidar_driver import AngledScanLine, Frame, TransportError

logger = logging.getLogger(__name__)

FULL_TURN = 360.0


def frame_sweep(start_angle: float, end_angle: float) -> float:
    """Angle covered by a frame, accounting for the 360 -> 0 wrap"""
    if end_angle >= start_angle:
        return end_angle - start_angle
    return (FULL_TURN - start_angle) + end_angle


class FrameStream:
    """Unbounded sequence of frames read from a single driver"""

    def __init__(self, driver):
        self.driver = driver
        self.finished = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> Frame:
        if self.finished:
            raise StopAsyncIteration

        try:
            return await self.driver.read_frame()
        except TransportError as e:
            self.finished = True
            logger.info(f"Frame stream ended: {e}")
            raise StopAsyncIteration

    def close(self):
        """Stop reading; the stream cannot be restarted"""
        self.finished = True


class PointStream:
    """Points of consecutive frames, in arrival order"""

    def __init__(self, frames: FrameStream):
        self.frames = frames
        self.pending = deque()

    def __aiter__(self):
        return self

    async def __anext__(self) -> AngledScanLine:
        while not self.pending:
            frame = await self.frames.__anext__()
            self.pending.extend(frame.points)
        return self.pending.popleft()

    def close(self):
        self.pending.clear()
        self.frames.close()


class RotationAggregator:
    """
    Batches points until the accumulated sweep reaches `rotations` turns.

    The angle covered beyond the threshold is not carried into the next
    batch, so batch boundaries drift by up to one frame's sweep. Points
    left over when the frame stream ends are dropped.
    """

    def __init__(self, frames: FrameStream, rotations: int = 1):
        if isinstance(rotations, bool) or not isinstance(rotations, int) or rotations < 1:
            raise ValueError(f"rotations must be a positive integer, got {rotations!r}")

        self.frames = frames
        self.rotations = rotations
        self.threshold = rotations * FULL_TURN

        self.pending: List[AngledScanLine] = []
        self.covered_angle = 0.0
        self.rotations_emitted = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[AngledScanLine]:
        while True:
            try:
                frame = await self.frames.__anext__()
            except StopAsyncIteration:
                if self.pending:
                    logger.debug(
                        f"Dropping partial rotation: {len(self.pending)} points, "
                        f"{self.covered_angle:.2f} degrees")
                    self.pending = []
                    self.covered_angle = 0.0
                raise

            batch = self._add_frame(frame)
            if batch is not None:
                return batch

    def _add_frame(self, frame: Frame) -> Optional[List[AngledScanLine]]:
        self.covered_angle += frame_sweep(frame.start_angle, frame.end_angle)
        self.pending.extend(frame.points)

        if self.covered_angle < self.threshold:
            return None

        batch = self.pending
        self.pending = []
        self.covered_angle = 0.0
        self.rotations_emitted += 1
        logger.debug(f"Rotation batch {self.rotations_emitted}: {len(batch)} points")
        return batch

    def close(self):
        self.pending = []
        self.covered_angle = 0.0
        self.frames.close()
