"""VPS 融合怪测试结果解析器

把融合怪脚本的自由文本输出解析为结构化结果：
- 基础信息、CPU、内存、磁盘 dd/fio
- 流媒体解锁、IP 质量检测
- 邮件端口、三网回程、回程路由、测速节点

每个分段由独立的解析器处理，使用工厂函数按分段名称创建。
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

# 确保导入 vps_parsers 时自动加载包目录下的 .env
ROOT_DIR = Path(__file__).resolve().parent
load_dotenv(ROOT_DIR / ".env", override=False)


def _configure_parser_logging():
    """为解析器包创建独立的日志配置"""
    parser_logger = logging.getLogger(__name__)  # __name__ == "vps_parsers"

    if getattr(parser_logger, "_parser_logging_configured", False):
        return

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(process)d - %(thread)d - %(filename)s:%(lineno)d - %(message)s'
    )

    if os.getenv("VPS_PARSER_LOG_TO_FILE", "true").lower() != "false":
        log_dir = os.getenv("VPS_PARSER_LOG_DIR", "./logs")
        log_file = os.getenv("VPS_PARSER_LOG_FILE", "vps_parser.log")
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_file),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        parser_logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    parser_logger.addHandler(stream_handler)
    parser_logger.setLevel(os.getenv("VPS_PARSER_LOG_LEVEL", "INFO").upper())

    # 保持独立日志文件，避免回传到根 logger
    parser_logger.propagate = False
    parser_logger._parser_logging_configured = True  # type: ignore[attr-defined]


_configure_parser_logging()

from .models import ParseError, ParseOutcome, SectionName, VpsTestResult
from .base import BaseExtractor, SectionParseError
from .aggregator import EXTRACTORS, VpsResultParser, parse
from .sections import extract_section, extract_sections


def create_parser(section: str) -> BaseExtractor:
    """根据分段名称创建解析器（工厂函数）

    Args:
        section: 分段名称（如 'cpuTest'、'diskFioTest'），不区分大小写

    Returns:
        对应的分段解析器实例

    Raises:
        ValueError: 不支持的分段名称

    Example:
        >>> parser = create_parser('diskFioTest')
        >>> fio = parser.extract(section_text, errors)
    """
    parsers = {cls.section.lower(): cls for cls in EXTRACTORS}

    parser_cls = parsers.get(str(getattr(section, "value", section)).lower())

    if not parser_cls:
        supported = ", ".join(cls.section for cls in EXTRACTORS)
        raise ValueError(f"不支持的分段：{section}。支持的分段：{supported}")

    return parser_cls()


# 导出公共 API
__all__ = [
    'parse', 'create_parser', 'VpsResultParser', 'ParseOutcome', 'ParseError', 'VpsTestResult',
    'SectionName', 'BaseExtractor', 'SectionParseError', 'extract_section', 'extract_sections',
]
