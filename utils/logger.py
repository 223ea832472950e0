"""
Logger Configuration
统一日志配置: Rich 控制台输出 + 可选文件日志
"""
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


# 日志与进度条、运行总结共用同一个 Console, 避免输出交错
console = Console()

FILE_LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

LOG_DIR = Path(__file__).parent.parent / "logs"

# 每个请求都会打 INFO 的第三方库
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logger(
    name: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    配置日志记录器, 重复调用不会叠加 handler

    Args:
        name: 日志记录器名称, None 为根日志器 (CLI 入口使用)
        level: 日志级别 (int 或 "INFO" 这类名称)
        log_file: logs/ 下的文件名, 为空则只输出到控制台
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    if log_file:
        path = LOG_DIR / log_file
        if not any(getattr(handler, "baseFilename", None) == str(path.resolve()) for handler in logger.handlers):
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


def flush_output() -> None:
    """刷新控制台与根日志器 handler 的缓冲输出"""
    console.file.flush()
    for handler in logging.getLogger().handlers:
        handler.flush()
