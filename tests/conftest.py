import asyncio
import struct
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


def encode_frame(start_raw, end_raw, points, message_type=1, speed=3600,
                 timestamp=0x1234, checksum=0xAB, length=None):
    """Build the wire bytes of one frame; points are (distance, intensity)"""
    if length is None:
        length = len(points)
    data = struct.pack('<BBHH', 0x54, (message_type << 5) | length, speed, start_raw)
    for distance, intensity in points:
        data += struct.pack('<HB', distance, intensity)
    data += struct.pack('<HHB', end_raw, timestamp, checksum)
    return data


def make_stream(data: bytes) -> asyncio.StreamReader:
    """StreamReader holding `data` followed by end of input"""
    stream = asyncio.StreamReader()
    stream.feed_data(data)
    stream.feed_eof()
    return stream


@pytest.fixture
def frame_bytes():
    return encode_frame


@pytest.fixture
def stream_from():
    return make_stream


@pytest.fixture
def capture_bytes():
    return (DATA_DIR / "lidar_output.bin").read_bytes()
