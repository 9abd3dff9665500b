"""
D300 LiDAR - Main Application

Opens the configured serial port and logs one line per rotation batch.
"""

import asyncio
import logging

from d300.config import Config
from d300.lidar_driver import D300Driver, TransportError
from d300.pointcloud import scan_to_array

logger = logging.getLogger(__name__)


def setup_logging():
    Config.init_directories()
    logging.basicConfig(
        level=logging.DEBUG if Config.DEBUG else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(f"{Config.LOGS_DIR}/d300.log")
        ]
    )


async def run(config=Config):
    """Stream rotation batches until the transport stops"""
    driver = await D300Driver.from_serial(
        port=config.lidar.port,
        baudrate=config.lidar.baudrate,
        timeout=config.lidar.timeout
    )

    try:
        async for batch in driver.rotation_stream(config.stream.rotations):
            data = scan_to_array(batch)
            if len(data):
                logger.info(
                    f"Rotation: {len(batch)} points, "
                    f"distance {data[:, 1].min():.0f}-{data[:, 1].max():.0f} mm")
            else:
                logger.info("Rotation: 0 points")
    finally:
        await driver.disconnect()
        logger.info(f"Statistics: {driver.get_statistics()}")


def main():
    setup_logging()
    logger.info(f"D300 LiDAR starting: {Config.to_dict()}")

    try:
        asyncio.run(run())
    except TransportError as e:
        logger.error(f"Transport error: {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == '__main__':
    main()
