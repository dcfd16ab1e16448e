import io
import logging
import re

from envprec.logging_utils import setup_logging
from envprec.run_id_manager import generate_run_id


def test_generate_run_id_prefers_custom_value() -> None:
    assert generate_run_id("nightly", prefix="precedence_") == "nightly"


def test_generate_run_id_uses_timestamp_and_prefix() -> None:
    run_id = generate_run_id(prefix="precedence_")
    assert re.fullmatch(r"precedence_\d{8}_\d{6}", run_id)


def test_file_logging_writes_under_run_directory(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("ENVPREC_DISABLE_FILE_LOGGING", raising=False)
    stream = io.StringIO()

    setup = setup_logging("jvm", log_dir=str(tmp_path), run_id="run1", stream=stream)
    logging.getLogger("envprec.test").info("hello from the probe")
    for handler in logging.getLogger().handlers:
        handler.flush()

    log_path = setup.get_log_filepath()
    assert log_path == tmp_path / "run1" / "envprec_jvm.log"
    assert "hello from the probe" in log_path.read_text(encoding="utf-8")
    assert "| INFO     | envprec.test" in stream.getvalue()


def test_file_logging_can_be_disabled(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("ENVPREC_DISABLE_FILE_LOGGING", "1")

    setup = setup_logging("jvm", log_dir=str(tmp_path), run_id="run1", stream=io.StringIO())

    assert setup.get_log_filepath() is None
    assert not (tmp_path / "run1").exists()


def test_quiet_console_hides_info(tmp_path) -> None:
    stream = io.StringIO()
    setup_logging("jvm", stream=stream, quiet=True)

    logging.getLogger("envprec.test").info("chatter")
    logging.getLogger("envprec.test").warning("problem")

    assert "chatter" not in stream.getvalue()
    assert "problem" in stream.getvalue()
