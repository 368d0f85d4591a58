"""网络测试解析器

负责解析邮件端口检测、三网回程、回程路由（nexttrace）与测速节点列表。
均为软失败分段。
"""

import logging
import re
from typing import List, Optional

from .base import BaseExtractor
from .evaluators import evaluate_route_quality
from .models import (
    EmailPlatform,
    EmailPortTest,
    NetworkReturnTest,
    Route,
    RouteHop,
    RouteSummary,
    RouteTest,
    SectionName,
    SpeedNode,
    SpeedTest,
)

logger = logging.getLogger(__name__)

CHECK = "✔"
CROSS = "✘"

NETWORK_RETURN_SKIP = ("三网回程--基于", "准确线路", "同一目标地址", "检测可能已越过")
CARRIERS = (("telecom", "电信"), ("unicom", "联通"), ("mobile", "移动"))

ROUTE_HEADERS = ("回程路由--基于nexttrace开源", "依次测试电信/联通/移动经过的地区及线路")
ROUTE_SKIP = ROUTE_HEADERS + ("核心程序来自nexttrace",)
ROUTE_TARGET_RE = re.compile(r"^(.*?[电信联通移动].*?)\s+(\d+\.\d+\.\d+\.\d+)$")
ROUTE_HOP_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*ms\s+(.*)$")
ASN_RE = re.compile(r"AS(\d+)")
ASN_NAME_RE = re.compile(r"\[([^\]]+)\]")
PROVIDER_RE = re.compile(r"([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
LOCATION_TOKEN_RE = re.compile(r"^[^\d\[\]]+$")
KEY_NODE_MARKERS = ("CHINANET", "UNICOM", "CMNET", "CMI", "CN2", "CMIN2")
PRIVATE_LOCATION = "私有地址"
MAX_KEY_NODES = 3

SPEED_ROW_RE = re.compile(
    r"^(.+?)\s+([0-9.]+\s*Mbps)\s+([0-9.]+\s*Mbps)\s+([0-9.]+\s*ms)(?:\s+([0-9.]+%|N/A))?"
)


class EmailPortTestParser(BaseExtractor[EmailPortTest]):
    """邮件端口检测解析器

    表头行包含 Platform 与 SMTP，之后每行为
    "平台 SMTP SMTPS POP3 POP3S IMAP IMAPS"（✔/✘），
    遇到第一个不含 ✔/✘ 的行即认为表格结束。
    """

    section = SectionName.EMAIL_PORT_TEST.value
    label = "邮件端口检测"

    def default(self) -> EmailPortTest:
        return EmailPortTest()

    def parse(self, text: str) -> EmailPortTest:
        lines = self.split_lines(text)
        header = next(
            (i for i, line in enumerate(lines) if "Platform" in line and "SMTP" in line),
            None,
        )
        self.ensure_found(text, header is not None)

        platforms: List[EmailPlatform] = []
        if header is None:
            return EmailPortTest(platforms=platforms)

        for line in lines[header + 1:]:
            if CHECK not in line and CROSS not in line:
                break
            parts = line.split()
            if len(parts) < 7:
                continue
            flags = [part == CHECK for part in parts[1:7]]
            platforms.append(EmailPlatform(parts[0], *flags))

        return EmailPortTest(platforms=platforms)


class NetworkReturnTestParser(BaseExtractor[NetworkReturnTest]):
    """三网回程解析器

    按 电信/联通/移动 关键字归类，行内容原样保存。
    """

    section = SectionName.NETWORK_RETURN_TEST.value
    label = "三网回程测试"

    def default(self) -> NetworkReturnTest:
        return NetworkReturnTest()

    def parse(self, text: str) -> NetworkReturnTest:
        result = NetworkReturnTest()

        for line in self.split_lines(text):
            if self._is_explanatory(line):
                continue
            for attr, keyword in CARRIERS:
                if keyword in line:
                    getattr(result, attr).append(line.strip())
                    break

        self.ensure_found(text, result.telecom or result.unicom or result.mobile)
        return result

    @staticmethod
    def _is_explanatory(line: str) -> bool:
        if any(marker in line for marker in NETWORK_RETURN_SKIP):
            return True
        return "国家:" in line and "城市:" in line and "服务商:" in line


class RouteTestParser(BaseExtractor[RouteTest]):
    """回程路由解析器

    目标行（运营商 + IPv4 地址）开始一条新路由，之后的 "延迟 ms 跳点信息"
    行作为该路由的跳点，直到下一个目标行。
    """

    section = SectionName.ROUTE_TEST.value
    label = "回程路由测试"

    def default(self) -> RouteTest:
        return RouteTest()

    def parse(self, text: str) -> RouteTest:
        lines = [line.strip() for line in self.split_lines(text)]
        start = next((i for i, line in enumerate(lines) if any(h in line for h in ROUTE_HEADERS)), 0)

        routes: List[Route] = []
        destination = ""
        target_ip = ""
        hops: List[RouteHop] = []

        def flush():
            if destination and hops:
                routes.append(Route(
                    destination=destination,
                    target_ip=target_ip,
                    hops=list(hops),
                    summary=summarize_route(hops),
                ))

        for line in lines[start:]:
            if any(marker in line for marker in ROUTE_SKIP):
                continue

            hop = ROUTE_HOP_RE.match(line)
            if hop:
                hops.append(parse_route_hop(len(hops) + 1, f"{hop.group(1)} ms", hop.group(2).strip(), line))
                continue

            target = ROUTE_TARGET_RE.match(line)
            if target:
                flush()
                destination = target.group(1).strip()
                target_ip = target.group(2).strip()
                hops = []

        flush()
        self.ensure_found(text, routes)
        return RouteTest(routes=routes)


def parse_route_hop(hop_number: int, latency: str, hop_info: str, raw_line: str) -> RouteHop:
    """解析单个跳点：ASN、ASN 名称、私有地址判定、地理位置与服务商域名"""
    is_private = "RFC1918" in hop_info or "RFC6598" in hop_info or hop_info.startswith("*")

    asn = ASN_RE.search(hop_info)
    asn_name = ASN_NAME_RE.search(hop_info)
    provider = PROVIDER_RE.search(hop_info)

    if is_private:
        location = PRIVATE_LOCATION
    else:
        location = " ".join(
            part for part in hop_info.split()
            if not (part.startswith("AS") or "[" in part or "." in part)
            and LOCATION_TOKEN_RE.match(part)
        )

    return RouteHop(
        hop_number=hop_number,
        latency=latency,
        location=location or "未知",
        is_private=is_private,
        raw_line=raw_line,
        asn=f"AS{asn.group(1)}" if asn else None,
        asn_name=asn_name.group(1) if asn_name else None,
        provider=provider.group(1) if provider else None,
    )


def _latency_value(latency: str) -> float:
    match = re.match(r"[0-9.]+", latency.strip())
    return float(match.group(0)) if match else 0.0


def summarize_route(hops: List[RouteHop]) -> RouteSummary:
    """生成路由摘要

    最终延迟取最后一跳的延迟（累计值，而非逐跳差值）；
    关键节点最多保留 3 个国内骨干网节点。
    """
    total_hops = len(hops)
    final_latency = _latency_value(hops[-1].latency) if hops else 0.0

    key_nodes: List[str] = []
    has_chinese_nodes = False
    for hop in hops:
        if not hop.asn_name or hop.is_private:
            continue
        if "中国" in hop.location:
            has_chinese_nodes = True
        if any(marker in hop.asn_name for marker in KEY_NODE_MARKERS):
            key_nodes.append(f"{hop.asn_name} ({hop.location})")

    return RouteSummary(
        total_hops=total_hops,
        final_latency=final_latency,
        key_nodes=key_nodes[:MAX_KEY_NODES],
        route_quality=evaluate_route_quality(final_latency, total_hops),
        has_chinese_nodes=has_chinese_nodes,
    )


class SpeedTestParser(BaseExtractor[SpeedTest]):
    """测速节点解析器

    表头行包含 位置 与 上传速度，之后每行为
    "位置 上传速度 下载速度 延迟 [丢包率]"。
    """

    section = SectionName.SPEED_TEST.value
    label = "速度测试"

    def default(self) -> SpeedTest:
        return SpeedTest()

    def parse(self, text: str) -> SpeedTest:
        lines = [line.strip() for line in self.split_lines(text)]
        header = next(
            (i for i, line in enumerate(lines) if "位置" in line and "上传速度" in line),
            None,
        )
        self.ensure_found(text, header is not None)

        nodes: List[SpeedNode] = []
        if header is None:
            return SpeedTest(nodes=nodes)

        for line in lines[header + 1:]:
            if line.startswith("-----"):
                continue
            node = parse_speed_row(line)
            if node:
                nodes.append(node)

        return SpeedTest(nodes=nodes)


def parse_speed_row(line: str) -> Optional[SpeedNode]:
    match = SPEED_ROW_RE.match(line)
    if not match:
        return None
    return SpeedNode(
        location=match.group(1).strip(),
        upload_speed=match.group(2),
        download_speed=match.group(3),
        latency=match.group(4),
        packet_loss=match.group(5),
    )
