"""
Configuration Module for the D300 LiDAR decoder
"""

import os
from dataclasses import dataclass


@dataclass
class LiDARConfig:
    """D300 serial link configuration"""
    port: str = "/dev/ttyUSB0"
    baudrate: int = 230400
    timeout: float = 1.0


@dataclass
class StreamConfig:
    """Rotation batching configuration"""
    rotations: int = 1  # Full turns per emitted batch


class Config:
    """Main Configuration Class"""

    # Environment settings
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"

    # Directory paths
    DATA_DIR = os.getenv("DATA_DIR", "./data")
    LOGS_DIR = os.path.join(DATA_DIR, "logs")

    # Component configurations
    lidar = LiDARConfig(
        port=os.getenv("LIDAR_PORT", "/dev/ttyUSB0"),
        baudrate=int(os.getenv("LIDAR_BAUDRATE", "230400")),
        timeout=float(os.getenv("LIDAR_TIMEOUT", "1.0"))
    )
    stream = StreamConfig(
        rotations=int(os.getenv("LIDAR_ROTATIONS", "1"))
    )

    @classmethod
    def init_directories(cls):
        """Initialize all required directories"""
        os.makedirs(cls.LOGS_DIR, exist_ok=True)

    @classmethod
    def to_dict(cls) -> dict:
        """Export configuration as dictionary"""
        return {
            "debug": cls.DEBUG,
            "data_dir": cls.DATA_DIR,
            "lidar": {
                "port": cls.lidar.port,
                "baudrate": cls.lidar.baudrate,
                "timeout": cls.lidar.timeout
            },
            "stream": {
                "rotations": cls.stream.rotations
            }
        }
