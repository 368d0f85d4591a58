"""结果汇总器

按固定顺序执行 分段切分 → 各分段解析 → 元数据解析，组装 VpsTestResult。

- 软失败分段只追加错误，解析继续
- 任一致命分段失败时追加一条 general 错误并返回 result=None，
  不返回任何部分结果
"""

import logging
import time
from typing import Dict, List, Tuple, Type

from .base import BaseExtractor
from .basic_info_parser import BasicInfoParser
from .hardware_parser import CpuTestParser, DiskDdTestParser, DiskFioTestParser, MemoryTestParser
from .ip_quality_parser import IpQualityTestParser
from .metadata_parser import parse_metadata
from .models import ParseError, ParseOutcome, SectionName, VpsTestResult
from .network_parser import EmailPortTestParser, NetworkReturnTestParser, RouteTestParser, SpeedTestParser
from .sections import extract_sections
from .streaming_parser import StreamingTestParser

logger = logging.getLogger(__name__)

# 解析顺序即报告中的分段顺序；各分段互不依赖
EXTRACTORS: Tuple[Type[BaseExtractor], ...] = (
    BasicInfoParser,
    CpuTestParser,
    MemoryTestParser,
    DiskDdTestParser,
    DiskFioTestParser,
    StreamingTestParser,
    IpQualityTestParser,
    EmailPortTestParser,
    NetworkReturnTestParser,
    RouteTestParser,
    SpeedTestParser,
)

# SectionName → VpsTestResult 字段名
RESULT_FIELDS: Dict[SectionName, str] = {
    SectionName.BASIC_INFO: "basic_info",
    SectionName.CPU_TEST: "cpu_test",
    SectionName.MEMORY_TEST: "memory_test",
    SectionName.DISK_DD_TEST: "disk_dd_test",
    SectionName.DISK_FIO_TEST: "disk_fio_test",
    SectionName.STREAMING_TEST: "streaming_test",
    SectionName.IP_QUALITY_TEST: "ip_quality_test",
    SectionName.EMAIL_PORT_TEST: "email_port_test",
    SectionName.NETWORK_RETURN_TEST: "network_return_test",
    SectionName.ROUTE_TEST: "route_test",
    SectionName.SPEED_TEST: "speed_test",
}


class VpsResultParser:
    """融合怪测试结果解析器（汇总入口）

    每次调用 parse() 都使用新的分段解析器实例，调用之间不共享可变状态，
    可以安全地并发调用。
    """

    def parse(self, raw_input: str) -> ParseOutcome:
        """解析完整的测试输出

        Args:
            raw_input: 融合怪脚本的完整文本输出

        Returns:
            ParseOutcome: 成功时 result 为完整结果（errors 可能包含软失败）；
            任一致命分段失败时 result 为 None
        """
        start = time.perf_counter()
        errors: List[ParseError] = []

        try:
            sections = extract_sections(raw_input)
            fields = {}
            for extractor_cls in EXTRACTORS:
                extractor = extractor_cls()
                name = SectionName(extractor.section)
                fields[RESULT_FIELDS[name]] = extractor.extract(sections[name], errors)

            result = VpsTestResult(metadata=parse_metadata(raw_input), **fields)
        except Exception as e:
            logger.error(f"解析终止: {e}")
            errors.append(ParseError(
                section="general",
                message=f"解析失败: {e}",
                suggestion="请检查输入格式是否正确",
            ))
            return ParseOutcome(result=None, errors=errors)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"解析完成，耗时 {elapsed_ms:.1f} ms，软错误 {len(errors)} 条")
        return ParseOutcome(result=result, errors=errors)


def parse(raw_input: str) -> ParseOutcome:
    """解析融合怪测试输出（模块级便捷入口）"""
    return VpsResultParser().parse(raw_input)
