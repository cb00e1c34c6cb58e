"""
Tests for opt-in logging.
"""

from stochmatch.utils import setup_logger


def test_setup_enables_package_logs(simple_lp, restore_logging):
    """After setup_logger, solver records reach application sinks."""
    from stochmatch import solve

    logger = setup_logger("WARNING")
    messages = []
    logger.add(messages.append, level="DEBUG")

    solve(simple_lp["problem"])

    assert any("simple LP finished" in str(m) for m in messages)


def test_setup_writes_log_file(tmp_path, restore_logging):
    log_file = tmp_path / "nested" / "stochmatch.log"
    logger = setup_logger("ERROR", log_file=log_file)

    logger.debug("file sink receives debug records")
    logger.remove()

    assert "file sink receives debug records" in log_file.read_text(encoding="utf-8")
