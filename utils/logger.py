"""
Logger Configuration
日志配置：Rich 控制台输出 + 可选文件日志
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# CLI 表格与日志共用同一个 Console (stderr)，保证 --json 输出到 stdout 时不被污染
console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DIR = Path(__file__).parent.parent / "logs"

# 本项目的顶层包，日志器名称即 __name__
PACKAGE_LOGGERS = ("config", "search", "intelligence", "pipeline")


def _console_handler(level: int, use_rich: bool) -> logging.Handler:
    if use_rich:
        handler: logging.Handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: str, level: int) -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_DIR / log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logger(
    name: Optional[str] = None,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    use_rich: bool = True,
) -> logging.Logger:
    """
    配置日志器 (重复调用不会重复挂载 handler)

    Args:
        name: 日志器名称，None 表示根日志器 (CLI 入口使用)
        level: 日志级别
        log_file: logs/ 目录下的文件名 (可选)
        use_rich: 是否使用 RichHandler

    Returns:
        配置好的 Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    logger.addHandler(_console_handler(level, use_rich))
    if log_file:
        logger.addHandler(_file_handler(log_file, level))
    return logger


def set_package_level(level: int) -> None:
    """统一调整各包日志级别 (CLI --verbose / --quiet)"""
    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level)
