"""Tests for logger cleanup cascade via BaseCloseable."""

import pytest

from gitrewrite.core.log import (
    ConsoleSink,
    FileSink,
    Logger,
    LogfireSink,
    close_logger,
    setup_logger,
)


@pytest.fixture(autouse=True)
def restore_console_logging(tmp_path):
    yield
    close_logger()
    setup_logger(
        log_root=tmp_path, repo_name="test",
        console=ConsoleSink(level="debug"),
    )


def file_logger(path):
    return Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(path)),
        logfire=LogfireSink(enabled=False),
    )


def test_logger_closes_file_via_context_manager(tmp_path):
    logger = file_logger(tmp_path / "test.log")
    logger.setup(log_root=tmp_path, repo_name="test")

    assert logger.file._file is not None
    assert not logger.file._file.closed

    with logger:
        logger.info("test message")

    assert logger.file._file.closed


def test_logger_closes_on_exception(tmp_path):
    logger = file_logger(tmp_path / "test.log")
    logger.setup(log_root=tmp_path, repo_name="test")

    with pytest.raises(ValueError), logger:
        logger.info("before exception")
        raise ValueError("test exception")

    assert logger.file._file.closed


def test_config_cascade_closes_logger(tmp_path):
    """Config.close() reaches the file sink through the logger."""
    from gitrewrite.core.config import Config, GitConfig

    config = Config(
        logger=file_logger(tmp_path / "cascade.log"),
        git=GitConfig(workdir=tmp_path),
        log_root=tmp_path,
    )

    assert config.logger.file._file is not None
    assert not config.logger.file._file.closed

    config.close()

    assert config.logger.file._file.closed


def test_file_written_and_flushed_on_close(tmp_path):
    log_file = tmp_path / "written.log"
    logger = file_logger(log_file)
    logger.setup(log_root=tmp_path, repo_name="write-test")

    with logger:
        logger.info("test message to file")

    assert "test message to file" in log_file.read_text()


def test_proxy_is_silent_without_logger():
    from gitrewrite.core.log import logger

    close_logger()

    logger.info("dropped")
    with logger.span("nothing", kind="merge"):
        logger.debug("also dropped")
