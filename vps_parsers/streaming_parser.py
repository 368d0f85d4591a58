"""流媒体解锁测试解析器

解析 CommonMediaTests 的 IPv4/IPv6 解锁结果与 TikTok 区域，
按服务名合并为 {name, ipv4_status, ipv6_status}。
"""

import logging
import re
from typing import Dict, List, Tuple

from .base import BaseExtractor
from .models import (
    CommonMediaTests,
    NOT_TESTED,
    RegionRestrictionCheck,
    SectionName,
    StreamingService,
    StreamingStatus,
    StreamingTest,
)

logger = logging.getLogger(__name__)

IPV4_MARKER = "以下为IPV4网络测试"
IPV6_MARKER = "以下为IPV6网络测试"

TIKTOK_RE = re.compile(r"Tiktok Region:\s*【(.+?)】", re.IGNORECASE)
SERVICE_RE = re.compile(r"([^:]+):\s*(.+)")
SKIPPED_LABELS = ("Region", "Forum")


class StreamingTestParser(BaseExtractor[StreamingTest]):
    """流媒体解锁测试解析器"""

    section = SectionName.STREAMING_TEST.value
    label = "流媒体解锁测试"

    def default(self) -> StreamingTest:
        return StreamingTest()

    def parse(self, text: str) -> StreamingTest:
        tiktok = TIKTOK_RE.search(text)
        ipv4_block, ipv6_block = split_ip_blocks(text)

        ipv4 = [StreamingStatus(service=name, status=status) for name, status in self._services(ipv4_block)]
        ipv6 = [StreamingStatus(service=name, status=status) for name, status in self._services(ipv6_block)]

        merged: Dict[str, StreamingService] = {}
        for item in ipv4:
            merged[item.service] = StreamingService(name=item.service, ipv4_status=item.status)
        for item in ipv6:
            existing = merged.get(item.service)
            if existing:
                existing.ipv6_status = item.status
            else:
                merged[item.service] = StreamingService(
                    name=item.service, ipv4_status=NOT_TESTED, ipv6_status=item.status
                )

        result = StreamingTest(
            common_media_tests=CommonMediaTests(
                ipv4=ipv4,
                ipv6=ipv6,
                tiktok_region=tiktok.group(1).strip() if tiktok else None,
            ),
            region_restriction_check=RegionRestrictionCheck(services=list(merged.values())),
        )
        self.ensure_found(text, merged or tiktok)
        return result

    def _services(self, block: str) -> List[Tuple[str, str]]:
        services = []
        for line in self.split_lines(block):
            match = SERVICE_RE.search(line)
            if not match:
                continue
            name = match.group(1).strip()
            if not name or any(skipped in name for skipped in SKIPPED_LABELS):
                continue
            services.append((name, match.group(2).strip()))
        return services


def split_ip_blocks(text: str) -> Tuple[str, str]:
    """按 IPv4/IPv6 标记拆分文本

    没有任何标记时整段视为 IPv4 结果。
    """
    v4 = text.find(IPV4_MARKER)
    v6 = text.find(IPV6_MARKER)

    if v6 == -1:
        return (text[v4:] if v4 != -1 else text), ""
    start = v4 if v4 != -1 else 0
    ipv4_block = text[start:v6] if start < v6 else ""
    return ipv4_block, text[v6:]
