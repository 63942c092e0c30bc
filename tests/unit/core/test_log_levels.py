"""Test level filtering and formatting of the file sink."""

import pytest

from sysroot_matrix.core.log import (
    LEVELS,
    ConsoleSink,
    FileSink,
    Logger,
    level_name,
    level_number,
    setup_logger,
)

TEXT = "[{level}] {message}"


@pytest.fixture
def file_logger(tmp_path):
    """Return a factory for a file-only logger at a given level."""
    log_file = tmp_path / "matrix.log"

    def _make(level, format_template=TEXT):
        return setup_logger(
            log_root=tmp_path,
            run_name="test",
            console=ConsoleSink(enabled=False),
            file=FileSink(
                enabled=True,
                level=level,
                path=str(log_file),
                format_template=format_template,
            ),
        ), log_file

    yield _make
    setup_logger(
        log_root=tmp_path,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


def _log_everything(logger):
    logger.spew("SPEW message")
    logger.trace("TRACE message")
    logger.debug("DEBUG message")
    logger.info("INFO message")
    logger.warn("WARN message")
    logger.error("ERROR message")


def test_spew_level_includes_all(file_logger):
    logger, log_file = file_logger("spew")
    _log_everything(logger)
    logger.close()

    content = log_file.read_text()
    for name in ("SPEW", "TRACE", "DEBUG", "INFO", "WARN", "ERROR"):
        assert f"{name} message" in content


def test_debug_level_filters_trace_and_spew(file_logger):
    logger, log_file = file_logger("debug")
    _log_everything(logger)
    logger.close()

    content = log_file.read_text()
    assert "SPEW message" not in content
    assert "TRACE message" not in content
    assert "DEBUG message" in content
    assert "INFO message" in content


def test_warn_level_filters_below_warn(file_logger):
    logger, log_file = file_logger("warn")
    _log_everything(logger)
    logger.close()

    content = log_file.read_text()
    assert "INFO message" not in content
    assert "WARN message" in content
    assert "ERROR message" in content


def test_text_format_carries_level(file_logger):
    logger, log_file = file_logger("info")
    logger.info("Building sysroots for {count} targets", count=3)
    logger.close()

    assert log_file.read_text().strip() == (
        "[info] Building sysroots for 3 targets"
    )


def test_command_output_logged_verbatim(file_logger):
    logger, log_file = file_logger("debug")
    logger.output("debug", "error[E0463]: can't find crate for `core` {x}")
    logger.close()

    assert log_file.read_text().strip() == (
        "[debug] error[E0463]: can't find crate for `core` {x}"
    )


def test_default_json_format(file_logger):
    logger, log_file = file_logger("info", format_template=None)
    logger.info("Test message")
    logger.close()

    content = log_file.read_text()
    assert content.startswith("{")
    assert '"name": "Test message"' in content


def test_level_ordering():
    names = list(LEVELS)

    assert names == ["spew", "trace", "debug", "info", "warn", "error", "fatal"]
    assert [LEVELS[n] for n in names] == sorted(LEVELS.values())
    assert LEVELS["spew"] == 1
    assert LEVELS["info"] == 9


def test_level_name_round_trip():
    for name, number in LEVELS.items():
        assert level_name(number) == name


def test_unknown_level_defaults_to_info():
    assert level_number("bogus") == LEVELS["info"]
    assert level_number("WARNING") == LEVELS["warn"]


def test_level_cascades_to_sinks():
    logger = Logger(level="debug", console=ConsoleSink(level="error"))

    assert logger.console.level == "error"
    assert logger.file.level == "debug"


def test_logger_closes_file_via_context_manager(tmp_path):
    logger = Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(tmp_path / "test.log")),
    )
    logger.setup(log_root=tmp_path, run_name="test")

    assert not logger.file._file.closed
    with pytest.raises(ValueError), logger:
        logger.info("before exception")
        raise ValueError("boom")

    assert logger.file._file.closed
    setup_logger(
        log_root=tmp_path,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )
