import logging

import pytest
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from grammarevo.utils.errors import EvaluationError, EvolutionError, GrammarEvoError
from grammarevo.utils.logging import (
    DetailedLogFormatter,
    GrammarEvoLogRecord,
    Logger,
    RichLoggingHandler,
    SimpleLogFormatter,
    capture_logs,
    configure_logging,
    get_logger,
    logger,
)
from grammarevo.utils.logging.emojis import get_emoji


@pytest.fixture(autouse=True)
def debug_level():
    previous = logger.get_level()
    logger.set_level("debug")
    yield
    logger.set_level(previous)


def test_capture_records_extras():
    with capture_logs() as logs:
        logger.info(
            "Generation 5 done",
            component="evolution",
            operation="generation",
            context={"best": 0.5},
        )
        logger.success("Configuration loaded", component="config", operation="load_config")

    entries = logs.get_logs()
    assert entries[0]["component"] == "evolution"
    assert entries[0]["operation"] == "generation"
    assert entries[0]["context"] == {"best": 0.5}
    assert entries[1]["level"] == "INFO"
    assert logs.contains("Configuration loaded")


def test_capture_level_filter():
    with capture_logs("warning") as logs:
        logger.debug("hidden")
        logger.warning("stagnating", component="meta", details=["no improvement"])
        logger.error("evaluation failed", component="evolution", exception=RuntimeError("boom"))

    assert logs.get_messages() == ["stagnating", "evaluation failed"]
    assert logs.get_logs()[0]["context"] == {"details": ["no improvement"]}
    assert logs.get_messages("error") == ["evaluation failed"]


def test_logger_level():
    custom = Logger("grammarevo.test", level="warning")
    assert custom.get_level() == "warning"
    assert custom.python_logger.level == logging.WARNING
    custom.set_level("debug")
    assert custom.python_logger.level == logging.DEBUG


def test_child_logger_reaches_capture():
    child = get_logger("grammarevo.child", component="selection")
    with capture_logs() as logs:
        child.info("picked parents")
    assert logs.get_logs()[0]["component"] == "selection"


def test_captured_output_on_logger():
    custom = Logger("grammarevo.captured", capture_output=True)
    custom.info("kept", operation="diversity")
    assert custom.captured_logs[0]["message"] == "kept"
    assert custom.captured_logs[0]["operation"] == "diversity"


def test_record_emoji_resolution():
    record = GrammarEvoLogRecord("info", "msg", component="Evolution", operation="diversity")
    assert record.component == "evolution"
    assert record.emoji == get_emoji("operation", "diversity")

    plain = GrammarEvoLogRecord("warning", "msg", operation="unheard_of")
    assert plain.emoji == get_emoji("level", "warning")


def test_formatters():
    record = GrammarEvoLogRecord(
        "error", "evaluation failed", component="evolution", operation="evaluate",
        context={"fitness": 0.123456},
    )
    header = SimpleLogFormatter(show_time=False).format_record(record)
    assert isinstance(header, Text)
    assert "[ERROR]" in header.plain
    assert "evaluate: evaluation failed" in header.plain

    assert isinstance(DetailedLogFormatter().format_record(record), Panel)
    bare = GrammarEvoLogRecord("info", "plain")
    assert isinstance(DetailedLogFormatter().format_record(bare), Text)


def test_configure_logging_replaces_handler():
    package_logger = logging.getLogger("grammarevo")
    first = configure_logging("info")
    second = configure_logging("debug")
    try:
        handlers = [h for h in package_logger.handlers if isinstance(h, RichLoggingHandler)]
        assert handlers == [second]
        assert first not in package_logger.handlers
    finally:
        package_logger.removeHandler(second)


def test_rich_handler_renders():
    console = Console(record=True, width=120)
    handler = RichLoggingHandler(console=console, formatter=SimpleLogFormatter(show_time=False))
    package_logger = logging.getLogger("grammarevo")
    package_logger.addHandler(handler)
    try:
        logger.info("rendered line", component="meta", operation="meta_optimize")
    finally:
        package_logger.removeHandler(handler)
    assert "rendered line" in console.export_text()


def test_error_codes():
    assert GrammarEvoError("x").details == {}
    assert EvaluationError("bad", genome_id="g1").details == {"genome_id": "g1"}
    assert EvolutionError("no", phase="generation").code == "EVOLUTION_GENERATION_ERROR"
    assert EvolutionError("no").code == "EVOLUTION_ERROR"
