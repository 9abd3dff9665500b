"""
Tests for configuration and the entry point
"""

import importlib
import pytest
from unittest.mock import AsyncMock, Mock, patch

import d300.config
from d300.config import Config, LiDARConfig, StreamConfig
from d300.lidar_driver import D300Driver


class TestConfig:

    def test_defaults(self):
        assert LiDARConfig().baudrate == 230400
        assert LiDARConfig().timeout == 1.0
        assert StreamConfig().rotations == 1

    def test_to_dict(self):
        d = Config.to_dict()
        assert set(d) == {"debug", "data_dir", "lidar", "stream"}
        assert d["lidar"]["port"] == Config.lidar.port
        assert d["stream"]["rotations"] == Config.stream.rotations

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("LIDAR_PORT", "/dev/ttyACM3")
        monkeypatch.setenv("LIDAR_BAUDRATE", "115200")
        monkeypatch.setenv("LIDAR_ROTATIONS", "4")
        monkeypatch.setenv("DEBUG", "true")
        try:
            config = importlib.reload(d300.config).Config
            assert config.lidar.port == "/dev/ttyACM3"
            assert config.lidar.baudrate == 115200
            assert config.stream.rotations == 4
            assert config.DEBUG is True
        finally:
            monkeypatch.undo()
            importlib.reload(d300.config)

    def test_init_directories(self, tmp_path, monkeypatch):
        logs_dir = tmp_path / "logs"
        monkeypatch.setattr(Config, "LOGS_DIR", str(logs_dir))
        Config.init_directories()
        assert logs_dir.is_dir()


class TestRun:

    @pytest.mark.asyncio
    async def test_run_logs_rotations(self, frame_bytes, stream_from, caplog):
        from d300 import main

        data = b''
        for i in range(4):
            data += frame_bytes(i * 9000, (i + 1) * 9000, [(1000 + i, 1)])
        writer = Mock()
        writer.wait_closed = AsyncMock()
        opener = AsyncMock(return_value=(stream_from(data), writer))

        config = Mock()
        config.lidar = LiDARConfig(port="/dev/ttyTEST")
        config.stream = StreamConfig(rotations=1)

        with patch('d300.lidar_driver.serial_asyncio.open_serial_connection', opener):
            with caplog.at_level("INFO", logger="d300.main"):
                await main.run(config)

        assert "Rotation: 4 points, distance 1000-1003 mm" in caplog.text
        writer.close.assert_called_once()
