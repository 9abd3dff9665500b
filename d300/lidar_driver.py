"""
D300 LiDAR Driver Module

Rotating 2D LiDAR streaming fixed-header measurement frames.
Communication: UART at 230400 baud
Data format: variable-length frame with 0x54 header, little-endian fields
"""

import asyncio
import struct
from typing import Optional, List
from dataclasses import dataclass, field
import logging

import serial
import serial_asyncio

logger = logging.getLogger(__name__)


class TransportError(IOError):
    """Read failure or end of input on the underlying byte source"""


@dataclass
class ScanLine:
    """Raw sample as it appears on the wire"""
    distance: int  # u16
    intensity: int  # u8


@dataclass(frozen=True)
class AngledScanLine:
    """Single measurement with its interpolated angle"""
    distance: int
    intensity: int
    angle: float  # degrees

    def to_dict(self) -> dict:
        return {
            'distance': self.distance,
            'intensity': self.intensity,
            'angle': round(self.angle, 2)
        }


@dataclass
class Frame:
    """One decoded telemetry frame"""
    header: int
    message_type: int  # 3 bits
    length: int  # 5 bits, number of points
    speed: int
    start_angle: float  # degrees
    points: List[AngledScanLine] = field(default_factory=list)
    end_angle: float = 0.0  # degrees
    timestamp: int = 0
    checksum: int = 0  # not verified

    def to_dict(self) -> dict:
        return {
            'message_type': self.message_type,
            'length': self.length,
            'speed': self.speed,
            'start_angle': self.start_angle,
            'end_angle': self.end_angle,
            'timestamp': self.timestamp,
            'checksum': self.checksum,
            'points': [p.to_dict() for p in self.points]
        }


class ByteReader:
    """Single byte and little-endian u16 reads over an asyncio stream"""

    U16_LE = struct.Struct('<H')

    def __init__(self, stream):
        self.stream = stream
        self.bytes_read = 0

    async def _read(self, size: int) -> bytes:
        try:
            data = await self.stream.readexactly(size)
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                f"End of input: expected {e.expected} bytes, got {len(e.partial)}") from e
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

        self.bytes_read += size
        return data

    async def read_u8(self) -> int:
        data = await self._read(1)
        return data[0]

    async def read_u16_le(self) -> int:
        data = await self._read(2)
        return self.U16_LE.unpack(data)[0]


class D300Driver:
    """
    Decoder for the D300 LiDAR frame stream

    Protocol:
    - Frame: [0x54, Info, Speed(2), StartAngle(2), Len * (Dist(2), Intensity), EndAngle(2), Timestamp(2), CRC]
    - Info: bits 7-5 message type, bits 4-0 point count (0-31)
    - Angles: u16 in hundredths of a degree
    - Multi-byte fields are little-endian
    - CRC is carried through but not verified

    The driver owns its reader exclusively. Only one stream should be
    derived from it at a time.
    """

    FRAME_HEADER = 0x54
    LENGTH_MASK = 0x1F
    DEFAULT_BAUDRATE = 230400

    def __init__(self, stream, writer: Optional[asyncio.StreamWriter] = None):
        self.reader = ByteReader(stream)
        self.writer = writer
        self.port: Optional[str] = None

        # Statistics
        self.frames_count = 0
        self.points_count = 0
        self.resync_bytes = 0
        self.last_frame: Optional[Frame] = None

    @classmethod
    async def from_serial(cls, port: str, baudrate: int = DEFAULT_BAUDRATE,
                          timeout: float = 1.0) -> 'D300Driver':
        """Open a serial port and bind a driver to it"""
        try:
            reader, writer = await serial_asyncio.open_serial_connection(
                url=port,
                baudrate=baudrate,
                timeout=timeout,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE
            )
        except serial.SerialException as e:
            logger.error(f"Failed to connect to D300 on {port}: {e}")
            raise TransportError(f"Cannot open {port}: {e}") from e

        driver = cls(reader, writer)
        driver.port = port
        logger.info(f"Connected to D300 on {port} at {baudrate} baud")
        return driver

    async def disconnect(self):
        """Close the serial connection if this driver opened it"""
        if self.writer is None:
            return

        self.writer.close()
        await self.writer.wait_closed()
        self.writer = None
        logger.info(f"Disconnected from D300 on {self.port}")

    async def _sync(self) -> int:
        """Discard bytes until the frame header shows up"""
        skipped = 0
        while True:
            header = await self.reader.read_u8()
            if header == self.FRAME_HEADER:
                break
            skipped += 1

        if skipped:
            self.resync_bytes += skipped
            logger.debug(f"Skipped {skipped} bytes before frame header")
        return header

    async def read_frame(self) -> Frame:
        """
        Decode exactly one frame from the stream.

        Raises TransportError if the stream fails or ends before the
        frame is complete.
        """
        header = await self._sync()

        info = await self.reader.read_u8()
        message_type = info >> 5
        length = info & self.LENGTH_MASK

        speed = await self.reader.read_u16_le()
        start_angle = await self.reader.read_u16_le() / 100.0

        lines = []
        for _ in range(length):
            distance = await self.reader.read_u16_le()
            intensity = await self.reader.read_u8()
            lines.append(ScanLine(distance, intensity))

        end_angle = await self.reader.read_u16_le() / 100.0

        # A single point has nothing to interpolate against
        if length > 1:
            angle_increment = (end_angle - start_angle) / (length - 1)
        else:
            angle_increment = 0.0

        points = [
            AngledScanLine(
                distance=line.distance,
                intensity=line.intensity,
                angle=start_angle + angle_increment * i
            )
            for i, line in enumerate(lines)
        ]

        timestamp = await self.reader.read_u16_le()
        checksum = await self.reader.read_u8()

        frame = Frame(
            header=header,
            message_type=message_type,
            length=length,
            speed=speed,
            start_angle=start_angle,
            points=points,
            end_angle=end_angle,
            timestamp=timestamp,
            checksum=checksum
        )

        self.frames_count += 1
        self.points_count += length
        self.last_frame = frame
        return frame

    def frame_stream(self):
        """Unbounded async iterator of frames"""
        from d300.streams import FrameStream
        return FrameStream(self)

    def scan_line_stream(self):
        """Async iterator of individual angle-tagged points"""
        from d300.streams import PointStream
        return PointStream(self.frame_stream())

    def rotation_stream(self, rotations: int = 1):
        """Async iterator of point batches covering `rotations` full turns"""
        from d300.streams import RotationAggregator
        return RotationAggregator(self.frame_stream(), rotations)

    def get_statistics(self) -> dict:
        """Get driver statistics"""
        return {
            'port': self.port,
            'frames': self.frames_count,
            'points': self.points_count,
            'resync_bytes': self.resync_bytes,
            'bytes_read': self.reader.bytes_read,
            'last_frame': self.last_frame.to_dict() if self.last_frame else None
        }
