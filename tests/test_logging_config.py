import logging

from tokenauth import logging_config as lc
from tokenauth.logging_config import ColorfulFormatter, get_colorful_logger, setup_colorful_logging


def test_get_colorful_logger_returns_logger():
    logger = get_colorful_logger("test-logger")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test-logger"


def test_get_colorful_logger_no_duplicate_handlers():
    logger = get_colorful_logger("dup-logger")
    n = len(logger.handlers)
    logger2 = get_colorful_logger("dup-logger")
    assert logger2 is logger
    assert len(logger2.handlers) == n


def test_fallback_streamhandler_formatting(monkeypatch, capsys):
    """
    当 rich 不可用时，应使用 StreamHandler + ColorfulFormatter，
    输出到 stderr，并包含分隔符与 ANSI 颜色码。
    """
    monkeypatch.setattr(lc, "RICH_AVAILABLE", False, raising=False)

    logger = get_colorful_logger("tokenauth-fallback-1")
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, ColorfulFormatter)

    logger.info("hello-fallback")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "hello-fallback" in captured.err
    assert " | " in captured.err
    assert "tokenauth-fallback-1" in captured.err
    assert "\x1b[" in captured.err


def test_level_name_in_message_not_recolored():
    formatter = ColorfulFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "INFO appears here", None, None)
    out = formatter.format(record)
    assert out.count("\x1b[32m") == 1
    assert out.endswith("INFO appears here")


def test_logger_level_controls_output(monkeypatch, capsys):
    """当设置为 WARNING 时，INFO 不应输出，WARNING 应输出。"""
    monkeypatch.setattr(lc, "RICH_AVAILABLE", False, raising=False)

    logger = setup_colorful_logging(logging.WARNING, "tokenauth-level-1")

    _ = capsys.readouterr()
    logger.info("info-msg")
    logger.warning("warn-msg")
    captured = capsys.readouterr().err

    assert "info-msg" not in captured
    assert "warn-msg" in captured


def test_rich_branch_used_when_available(monkeypatch):
    """注入 FakeConsole/FakeRichHandler 模拟 rich 存在。"""

    class FakeConsole:
        def __init__(self, *args, **kwargs):
            self.kwargs = kwargs
            self.width = 80

    class FakeRichHandler(logging.Handler):
        def __init__(self, *args, **kwargs):
            super().__init__()
            self.console = kwargs.get("console")

    monkeypatch.setattr(lc, "Console", FakeConsole, raising=False)
    monkeypatch.setattr(lc, "RichHandler", FakeRichHandler, raising=False)
    monkeypatch.setattr(lc, "RICH_AVAILABLE", True, raising=False)

    logger = get_colorful_logger("tokenauth-rich-1")
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, FakeRichHandler)
    assert handler.console.kwargs == {"stderr": True}
    # rich 分支下 formatter 应为 '%(message)s'
    assert handler.formatter._fmt == "%(message)s"
