import logging
import re

from profile_bootstrap.logging_utils import (
    TrimmingFileHandler,
    configure_logging,
    log_event,
    trim_log,
)

LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[(INFO|WARNING)\] .+$")


def test_logging_default_level(caplog):
    configure_logging(False)
    logging.debug("debug")
    logging.info("info")
    logging.warning("warn")
    assert [r.getMessage() for r in caplog.records] == ["warn"]


def test_logging_verbose_level(caplog):
    configure_logging(True)
    logging.debug("debug")
    logging.info("info")
    assert [r.getMessage() for r in caplog.records] == ["debug", "info"]


def test_log_file_format_and_info_floor(tmp_path):
    log_path = tmp_path / "logs" / "bootstrap.log"
    configure_logging(False, str(log_path))
    logging.info("marker advanced")
    logging.warning("registry unavailable")
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert all(LINE_RE.match(line) for line in lines)
    assert lines[0].endswith("[INFO] marker advanced")


def test_trim_log_keeps_recent_lines(tmp_path):
    path = tmp_path / "bootstrap.log"
    path.write_text("".join(f"line {i}\n" for i in range(1001)), encoding="utf-8")
    assert trim_log(path) == 900
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "line 101"
    assert lines[-1] == "line 1000"


def test_trim_log_leaves_small_files_alone(tmp_path):
    path = tmp_path / "bootstrap.log"
    path.write_text("a\nb\n", encoding="utf-8")
    assert trim_log(path) == 2
    assert path.read_text(encoding="utf-8") == "a\nb\n"
    assert trim_log(tmp_path / "missing.log") == 0


def test_handler_trims_while_writing(tmp_path):
    path = tmp_path / "bootstrap.log"
    handler = TrimmingFileHandler(str(path), max_lines=50, keep_lines=40)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("profile_bootstrap.test_trim")
    logger.propagate = False
    logger.addHandler(handler)
    try:
        for i in range(120):
            logger.warning("msg %d", i)
    finally:
        logger.removeHandler(handler)
        handler.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert 40 <= len(lines) <= 50
    assert lines[-1] == "msg 119"


def test_reconfigure_closes_file_handlers(tmp_path):
    configure_logging(False, str(tmp_path / "one.log"))
    logging.warning("opened")
    old = next(
        h
        for h in logging.getLogger().handlers
        if isinstance(h, TrimmingFileHandler)
    )
    configure_logging(False, str(tmp_path / "two.log"))
    assert old.stream is None or old.stream.closed
    assert old not in logging.getLogger().handlers


def test_log_event_never_raises(caplog):
    configure_logging(False, log_level="info")
    log_event("update_check_done", checker="modules", updates=2)
    log_event("bad_field", name="collides with LogRecord.name")
    assert "update_check_done checker=modules updates=2" in caplog.text


def test_unopenable_log_file_falls_back_to_stderr(tmp_path, capsys):
    log_dir = tmp_path / "bootstrap.log"
    log_dir.mkdir()
    configure_logging(False, str(log_dir))
    logging.warning("still reported")
    err = capsys.readouterr().err
    assert "Could not open log file" in err
    assert "still reported" in err


def test_handler_write_errors_do_not_propagate(tmp_path, monkeypatch):
    monkeypatch.setattr(logging, "raiseExceptions", False)
    handler = TrimmingFileHandler(str(tmp_path / "bootstrap.log"))
    handler.stream.close()
    handler.stream = None

    def refuse():
        raise PermissionError("read-only file system")

    monkeypatch.setattr(handler, "_open", refuse)
    try:
        handler.emit(logging.makeLogRecord({"msg": "dropped", "levelno": logging.WARNING}))
    finally:
        handler.close()
