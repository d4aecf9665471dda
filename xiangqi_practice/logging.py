"""
中央日志配置

提供统一的日志目录常量和 logger 配置。
"""

from pathlib import Path

from loguru import logger

# 路径常量
PROJECT_ROOT = Path(__file__).parent.parent
RUNTIME_LOGS_DIR = PROJECT_ROOT / "logs"

_file_sink_id: int | None = None


def configure_file_logging(log_dir: Path | None = None, level: str = "DEBUG") -> Path:
    """配置 logger 输出到文件（重复调用会替换之前的文件输出）"""
    global _file_sink_id

    log_dir = log_dir or RUNTIME_LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "app.log"

    if _file_sink_id is not None:
        logger.remove(_file_sink_id)
    _file_sink_id = logger.add(
        log_path,
        rotation="10 MB",
        retention="7 days",
        level=level,
    )
    return log_path


__all__ = ["logger", "RUNTIME_LOGS_DIR", "configure_file_logging"]
