"""元数据解析

在完整输入（而不是某个分段）上查找脚本版本、总耗时与测试时间。

"时间" 标签也出现在其他位置（如 "系统在线时间"），因此测试时间
只在 "总共花费" 行之后的几行内查找；找不到时退回到输入末尾
1000 个字符内查找。这是基于位置的启发式规则，依赖脚本的输出顺序。
"""

import logging
import re

from .models import ReportMetadata, UNKNOWN

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r"VPS融合怪版本[：:]\s*(.+)")
DURATION_RE = re.compile(r"总共花费\s*[:：]\s*(.+)")
TIME_RE = re.compile(r"时间\s*[:：]\s*(.+)")

TIME_LOOKAHEAD_LINES = 4
TAIL_WINDOW = 1000


def find_test_time(raw: str, duration_match) -> str:
    """定位测试时间（优先在总耗时行之后的几行内查找）"""
    if duration_match:
        following = raw[duration_match.start():].split("\n")[1:TIME_LOOKAHEAD_LINES + 1]
        for line in following:
            match = TIME_RE.search(line.strip())
            if match:
                return match.group(1).strip()

    tail = raw[max(0, len(raw) - TAIL_WINDOW):]
    match = TIME_RE.search(tail)
    if match:
        logger.debug("测试时间未出现在总耗时行之后，使用末尾窗口中的时间")
        return match.group(1).strip()
    return UNKNOWN


def parse_metadata(raw: str) -> ReportMetadata:
    """解析元数据，缺失的字段为 "未知" """
    raw = raw.replace("\r", "")
    version = VERSION_RE.search(raw)
    duration = DURATION_RE.search(raw)

    return ReportMetadata(
        test_time=find_test_time(raw, duration),
        total_duration=duration.group(1).strip() if duration else UNKNOWN,
        version=version.group(1).strip() if version else UNKNOWN,
    )
