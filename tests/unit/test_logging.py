"""Unit tests for agentboard logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from agentboard.conversations import ConversationRouter
from agentboard.diagnostics import Diagnostics
from agentboard.logging import (
    LOG_DIR_ENV,
    LOG_LEVEL_ENV,
    LOG_PREVIEW_CHARS,
    RedactingFilter,
    get_logger,
    run_logger,
    sanitize_for_log,
    setup_logging,
    truncate_output,
)
from agentboard.triggers import AgentKind

RUNTIME_KEY = "key_" + "a1B2c3D4" * 3


@pytest.fixture(autouse=True)
def reset_root_logger():
    yield
    root = logging.getLogger("agentboard")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


def read_log(log_dir: Path) -> str:
    return (log_dir / "agentboard.log").read_text(encoding="utf-8")


def make_record(msg: str, args: tuple) -> logging.LogRecord:
    return logging.LogRecord("agentboard.runtime", logging.INFO, __file__, 1, msg, args, None)


@pytest.mark.unit
class TestSanitizeForLog:
    """Tests for sanitize_for_log."""

    def test_runtime_key_replaced(self) -> None:
        assert sanitize_for_log(f"launch failed with {RUNTIME_KEY}") == (
            "launch failed with [API_KEY]"
        )

    def test_basic_credentials_replaced(self) -> None:
        """The runtime is called with Basic auth built from the key."""
        text = "Authorization: Basic a2V5XzEyMzo="

        assert sanitize_for_log(text) == "Authorization: Basic [REDACTED]"

    def test_bearer_token_replaced(self) -> None:
        assert sanitize_for_log("Bearer eyJhbGciOi.payload.sig") == "Bearer [REDACTED]"

    def test_query_credentials_replaced(self) -> None:
        assert (
            sanitize_for_log("GET /jobs?api_key=abc123&page=2")
            == "GET /jobs?api_key=[REDACTED]&page=2"
        )

    @pytest.mark.parametrize(
        "text",
        [
            "key_id is short",
            "Basically fine",
            "RESULT: PASS — 0099",
            "QA ticket 0099",
        ],
    )
    def test_ordinary_text_unchanged(self, text: str) -> None:
        assert sanitize_for_log(text) == text


@pytest.mark.unit
class TestTruncateOutput:
    """Tests for truncate_output."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_output("Checked every criterion.") == "Checked every criterion."

    def test_long_text_shortened_to_preview(self) -> None:
        text = "x" * (LOG_PREVIEW_CHARS + 120)

        result = truncate_output(text)

        assert result == "x" * LOG_PREVIEW_CHARS + "... [120 more chars]"

    def test_custom_length(self) -> None:
        assert truncate_output("abcdef", max_length=3) == "abc... [3 more chars]"


@pytest.mark.unit
class TestLoggers:
    """Tests for get_logger, run_logger and RedactingFilter."""

    @pytest.mark.parametrize("name", ["runtime", "agentboard.runtime"])
    def test_component_logger_under_agentboard(self, name: str) -> None:
        assert get_logger(name) is logging.getLogger("agentboard.runtime")

    def test_root_name_not_prefixed(self) -> None:
        assert get_logger("agentboard") is logging.getLogger("agentboard")

    def test_run_logger_prefixes_run(self) -> None:
        log = run_logger("orchestrator", "run-7", "qa-agent")

        message, _ = log.process("Completed: pass", {})

        assert log.logger is get_logger("orchestrator")
        assert message == "[run-7 qa-agent] Completed: pass"

    def test_filter_renders_and_scrubs_arguments(self) -> None:
        record = make_record("Launch failed: %s", (RUNTIME_KEY,))

        assert RedactingFilter().filter(record)
        assert record.getMessage() == "Launch failed: [API_KEY]"

    def test_filter_leaves_clean_records_alone(self) -> None:
        record = make_record("Moved %s to %s", ("0099", "col-qa"))

        RedactingFilter().filter(record)

        assert record.args == ("0099", "col-qa")


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_component_lines_reach_file(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)

        get_logger("board").info("Moved 0099 to col-qa")
        run_logger("orchestrator", "run-7", "qa-agent").info("Completed: %s", "pass")

        content = read_log(tmp_path)
        assert "INFO    [agentboard.board] Moved 0099 to col-qa" in content
        assert "[agentboard.orchestrator] [run-7 qa-agent] Completed: pass" in content

    def test_credentials_never_reach_file(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)

        get_logger("runtime").warning("Runtime rejected %s", "Basic a2V5XzEyMzo=")
        get_logger("runtime").warning("Retrying with %s", RUNTIME_KEY)

        content = read_log(tmp_path)
        assert RUNTIME_KEY not in content
        assert "a2V5XzEyMzo" not in content
        assert "Runtime rejected Basic [REDACTED]" in content
        assert "Retrying with [API_KEY]" in content

    def test_level_filters(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, level="warning", console=False)

        get_logger("triggers").info("Accepted trigger work-btn-1-a")
        get_logger("triggers").warning("Rejected trigger work-btn-1-a")

        content = read_log(tmp_path)
        assert "Accepted trigger" not in content
        assert "Rejected trigger" in content

    def test_unknown_level_means_info(self, tmp_path: Path) -> None:
        root = setup_logging(log_dir=tmp_path, level="LOUD", console=False)

        assert root.level == logging.INFO

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        log_dir = tmp_path / "from-env"
        monkeypatch.setenv(LOG_DIR_ENV, str(log_dir))
        monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")

        root = setup_logging(console=False)

        assert root.level == logging.DEBUG
        assert (log_dir / "agentboard.log").exists()

    def test_repeat_call_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path / "first", console=False)
        root = setup_logging(log_dir=tmp_path / "second", console=True)

        assert len(root.handlers) == 2
        get_logger("api").info("Serving")
        assert "Serving" not in read_log(tmp_path / "first")
        assert "Serving" in read_log(tmp_path / "second")


@pytest.mark.unit
class TestFullTextKept:
    """Log lines are shortened; conversation and diagnostics text is not."""

    def test_orphan_keeps_full_report(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)
        report = "Checked every criterion.\n" * 100 + "QA RESULT: PASS — 0099"

        orphan = Diagnostics().record_orphan("run-9", report, {"outcome": "pass"})

        assert orphan.content == report
        content = read_log(tmp_path)
        assert "Orphaned completion for run run-9" in content
        assert "more chars]" in content
        assert "QA RESULT: PASS — 0099" not in content

    def test_conversation_message_not_truncated(self) -> None:
        router = ConversationRouter()
        text = "Implement ticket 0071.\n" + "Acceptance criterion.\n" * 200

        router.append_user_message(AgentKind.IMPLEMENTATION, text, "work-btn-1-a")

        assert router.log(AgentKind.IMPLEMENTATION).messages[0].content == text
