"""Unit tests for coursereg logging configuration."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from coursereg.logging import get_logger, mask_identifier, sanitize_for_log, setup_logging


@pytest.fixture(autouse=True)
def reset_coursereg_logger():
    """Detach handlers added by setup_logging so other tests see a clean logger."""
    yield
    logger = logging.getLogger("coursereg")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_log_directory(self) -> None:
        """Log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "nested" / "logs"
            setup_logging(log_dir=log_dir, console=False)

            assert log_dir.exists()

    def test_writes_to_log_file(self) -> None:
        """Log messages are written to the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)
            logger.info("test message 123")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "test message 123" in content

    def test_log_format_includes_component_name(self) -> None:
        """Log entries include level and component logger name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)
            logging.getLogger("coursereg.enrollment.manager").info("component test")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            # Format: 2026-01-28 16:30:45 | INFO     | coursereg.enrollment.manager | message
            assert " | INFO" in content
            assert "coursereg.enrollment.manager" in content

    def test_all_components_write_to_same_file(self) -> None:
        """All component loggers write to the same log file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)

            logging.getLogger("coursereg.registry.catalog").info("catalog log")
            logging.getLogger("coursereg.invoicing.manager").info("invoice log")
            logging.getLogger("coursereg.audit").info("audit log")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "catalog log" in content
            assert "invoice log" in content
            assert "audit log" in content

    def test_log_level_configurable(self) -> None:
        """Log level filters messages appropriately."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, level="WARNING", console=False)
            logger = logging.getLogger("coursereg")
            logger.info("should not appear")
            logger.warning("should appear")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "should not appear" not in content
            assert "should appear" in content

    @patch.dict(os.environ, {"COURSEREG_LOG_LEVEL": "DEBUG"})
    def test_log_level_from_env(self) -> None:
        """Log level can be set via environment variable."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)

            assert logger.level == logging.DEBUG

    def test_log_dir_from_env(self) -> None:
        """Log directory can be set via environment variable."""
        with (
            tempfile.TemporaryDirectory() as tmpdir,
            patch.dict(os.environ, {"COURSEREG_LOG_DIR": tmpdir}),
        ):
            setup_logging(console=False)

            assert (Path(tmpdir) / "coursereg.log").exists()

    def test_returns_coursereg_logger(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)

            assert logger.name == "coursereg"

    def test_no_duplicate_handlers_on_repeated_setup(self) -> None:
        """Repeated setup_logging calls don't add duplicate handlers."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)
            setup_logging(log_dir=tmpdir, console=False)

            assert len(logging.getLogger("coursereg").handlers) == 1


@pytest.mark.unit
class TestRotation:
    """Tests for log rotation."""

    def test_logs_rotate_at_max_size(self) -> None:
        """Log files rotate when they reach max size."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, max_bytes=500, backup_count=2, console=False)
            logger = logging.getLogger("coursereg")

            for i in range(50):
                logger.info("Rotation test message number %d with padding data", i)

            assert (Path(tmpdir) / "coursereg.log").exists()
            assert (Path(tmpdir) / "coursereg.log.1").exists()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_prefixes_coursereg(self) -> None:
        assert get_logger("invoicing").name == "coursereg.invoicing"

    def test_get_logger_no_double_prefix(self) -> None:
        assert get_logger("coursereg.reports").name == "coursereg.reports"


@pytest.mark.unit
class TestPersonalData:
    """Tests for masking personal data in log output."""

    def test_mask_identifier_keeps_edges(self) -> None:
        assert mask_identifier("1710034065") == "17******65"

    def test_mask_identifier_short_value(self) -> None:
        """Short values are fully masked."""
        assert mask_identifier("AB12") == "****"

    def test_sanitize_masks_email(self) -> None:
        result = sanitize_for_log("duplicate email ana.torres@example.com")
        assert "ana.torres" not in result
        assert "a***@example.com" in result

    def test_sanitize_masks_identification(self) -> None:
        result = sanitize_for_log("Identification number 1710034065 is already registered")
        assert "1710034065" not in result
        assert "17******65" in result

    def test_safe_text_unchanged(self) -> None:
        """Text without personal data is unchanged."""
        text = "Inscription 12 moved to ENROLLED"
        assert sanitize_for_log(text) == text
