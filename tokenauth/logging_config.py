"""
彩色日志配置模块
rich 可用时使用 RichHandler，否则退回 ANSI 彩色 StreamHandler
日志统一写到 stderr，stdout 只留给命令输出
"""
import logging
import sys
from typing import Optional

try:
    from rich.console import Console
    from rich.logging import RichHandler
    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False


class ColorfulFormatter(logging.Formatter):
    """彩色日志格式化器"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    TIME_COLOR = '\033[34m'
    RESET = '\033[0m'

    def format(self, record):
        message = super().format(record)

        if self._fmt and '%(asctime)s' in self._fmt:
            time_str = self.formatTime(record, self.datefmt)
            message = message.replace(time_str, f"{self.TIME_COLOR}{time_str}{self.RESET}", 1)

        # 只替换第一次出现的级别名，避免误改消息正文
        level_name = record.levelname
        if level_name in self.COLORS:
            message = message.replace(level_name, f"{self.COLORS[level_name]}{level_name}{self.RESET}", 1)

        return message


def _make_handler(level: int) -> logging.Handler:
    if RICH_AVAILABLE:
        console = Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
        )
        # RichHandler 自己输出时间与级别
        handler.setFormatter(logging.Formatter('%(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    handler.setLevel(level)
    return handler


def setup_colorful_logging(level: int = logging.INFO, name: Optional[str] = None) -> logging.Logger:
    """
    设置彩色日志配置

    Args:
        level: 日志级别
        name: 日志器名称，None 表示根日志器

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    logger.addHandler(_make_handler(level))
    return logger


def get_colorful_logger(name: Optional[str] = None) -> logging.Logger:
    """获取彩色日志器"""
    return setup_colorful_logging(name=name)
