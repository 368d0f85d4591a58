"""本地解析服务实现

直接在当前进程内调用 vps_parsers.parse 完成解析。
"""

import logging
import time
from pathlib import Path
from typing import Dict, Any

from vps_parsers.base import BaseExtractor
from vps_parsers.service_interface import ReportServiceInterface
from vps_parsers import parse

logger = logging.getLogger(__name__)


class LocalReportService(ReportServiceInterface):
    """本地解析服务实现

    支持文本、字节内容与文件三种输入；字节内容使用
    UTF-8 → GB18030 → GBK → latin-1 的顺序解码。
    """

    def parse_text(self, raw_input: str) -> Dict[str, Any]:
        start = time.perf_counter()
        outcome = parse(raw_input)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response = outcome.to_dict()
        response["metadata"] = {
            "parse_time_ms": round(elapsed_ms, 3),
            "error_count": len(outcome.errors),
            "input_length": len(raw_input),
        }

        if outcome.ok:
            logger.info(f"本地解析完成，软错误 {len(outcome.errors)} 条，耗时 {elapsed_ms:.1f} ms")
        else:
            logger.warning(f"本地解析失败，错误 {len(outcome.errors)} 条")

        return response

    def parse_bytes(self, content: bytes) -> Dict[str, Any]:
        """解码字节内容后解析"""
        return self.parse_text(BaseExtractor.decode_bytes(content))

    def parse_file(self, file_path: str) -> Dict[str, Any]:
        logger.info(f"本地解析文件: {file_path}")

        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"测试结果文件不存在: {file_path}")

        return self.parse_bytes(path.read_bytes())
