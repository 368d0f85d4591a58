"""IP 质量检测解析器

解析 securityCheck 的输出：

1. 数据库编号说明（最多 18 个数据库，编号为 0-9/A-Z 的单字符）
2. IPv4 / IPv6 两块带来源的评分指标，每个值后面的方括号列出报告该值的数据库编号
3. 黑名单记录统计与 DNS 黑名单统计
4. 开放式的 "安全信息" 块：任意 "标签: 值" 行都保存为映射，值保持原样
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from .base import BaseExtractor
from .evaluators import (
    evaluate_ip_abuse_description,
    evaluate_ip_reputation,
    evaluate_ip_risk_score,
    evaluate_ip_threat_level,
    evaluate_ip_trust,
)
from .models import (
    BlacklistStats,
    DatabaseSource,
    DnsBlacklist,
    IpQualityMetric,
    IpQualityTest,
    Ipv4Quality,
    Ipv6Quality,
    Rating,
    SecurityInfoItem,
    SectionName,
    SourcedCount,
)

logger = logging.getLogger(__name__)

_SEP = r"\s*[:：]\s*"
_NUMBER = r"([0-9]+(?:\.[0-9]+)?)"
_SOURCES = r"\s*(?:\[([^\]]*)\])?"

# 数据库名 → (网址, 说明)
KNOWN_DATABASES: Dict[str, Tuple[str, str]] = {
    "ipinfo": ("https://ipinfo.io/", "IP地理位置和ASN信息"),
    "scamalytics": ("https://scamalytics.com/", "欺诈检测和风险评估"),
    "virustotal": ("https://www.virustotal.com/", "恶意软件和威胁检测"),
    "abuseipdb": ("https://www.abuseipdb.com/", "IP滥用报告数据库"),
    "ip2location": ("https://www.ip2location.com/", "IP地理定位服务"),
    "ip-api": ("http://ip-api.com/", "IP地理位置API"),
    "ipwhois": ("https://ipwhois.app/", "IP WHOIS信息查询"),
    "ipregistry": ("https://ipregistry.co/", "IP地理位置和威胁情报"),
    "ipdata": ("https://ipdata.co/", "IP地理位置和安全数据"),
    "db-ip": ("https://db-ip.com/", "IP地理位置数据库"),
    "ipapiis": ("https://ipapi.is/", "IP地理位置和安全检测"),
    "ipapicom": ("https://ipapi.com/", "IP地理位置API服务"),
    "bigdatacloud": ("https://www.bigdatacloud.com/", "IP地理位置和网络数据"),
    "dkly": ("https://data.dkly.net/", "IP威胁情报"),
    "ipqualityscore": ("https://www.ipqualityscore.com/", "综合IP质量评分"),
    "ipintel": ("https://check.getipintel.net/", "IP代理和VPN检测"),
    "ipfighter": ("https://ipfighter.com/", "IP欺诈和风险评估"),
    "fraudlogix": ("https://fraudlogix.com/", "IP欺诈检测服务"),
}

DEFAULT_DATABASE_IDS = "0123456789ABCDEFGH"

LEGEND_RE = re.compile(r"以下为各数据库编号[\s\S]*?(?:IPV4:|\Z)")
LEGEND_ENTRY_RE = re.compile(r"([^|\[\]]+)数据库\s*\[([0-9A-Z])\]")

THREAT_LEVEL_RE = re.compile(r"威胁级别" + _SEP + r"(.+)")
THREAT_PAIR_RE = re.compile(r"([a-zA-Z]+)\s*\[([^\]]+)\]")

BLACKLIST_RE = {
    "harmless_count": re.compile(r"无害记录数" + _SEP + _NUMBER + _SOURCES),
    "malicious_count": re.compile(r"恶意记录数" + _SEP + _NUMBER + _SOURCES),
    "suspicious_count": re.compile(r"可疑记录数" + _SEP + _NUMBER + _SOURCES),
    "undetected_count": re.compile(r"无记录数" + _SEP + _NUMBER + _SOURCES),
}
DNS_BLACKLIST_RE = re.compile(
    r"DNS-黑名单" + _SEP + r"(\d+)\(Total_Check\)\s*(\d+)\(Clean\)\s*(\d+)\(Blacklisted\)\s*(\d+)\(Other\)"
)
SECURITY_BLOCK_RE = re.compile(r"安全信息[:：]([\s\S]*?)(?:DNS-黑名单|Google搜索可行性|\Z)")
SECURITY_LINE_RE = re.compile(r"^([^:：]+)[:：]\s*(.+)$")
GOOGLE_RE = re.compile(r"Google搜索可行性[：:]\s*(\w+)")


def _metric_re(label: str) -> "re.Pattern[str]":
    return re.compile(label + _SEP + _NUMBER + _SOURCES)


def _described_metric_re(label: str) -> "re.Pattern[str]":
    return re.compile(label + _SEP + _NUMBER + r"\s*\(([^)]+)\)" + _SOURCES)


# 指标字段 → (正则, 评级函数)
SCORE_METRICS: Dict[str, Tuple["re.Pattern[str]", Optional[Callable[[float], Rating]]]] = {
    "reputation": (_metric_re(r"声誉\(越高越好\)"), evaluate_ip_reputation),
    "trust_score": (_metric_re(r"信任得分\(越高越好\)"), evaluate_ip_trust),
    "vpn_score": (_metric_re(r"VPN得分\(越低越好\)"), evaluate_ip_risk_score),
    "proxy_score": (_metric_re(r"代理得分\(越低越好\)"), evaluate_ip_risk_score),
    "community_votes_harmless": (_metric_re(r"社区投票-无害"), None),
    "community_votes_malicious": (_metric_re(r"社区投票-恶意"), None),
    "threat_score": (_metric_re(r"威胁得分\(越低越好\)"), evaluate_ip_risk_score),
    "fraud_score": (_metric_re(r"欺诈得分\(越低越好\)"), evaluate_ip_risk_score),
    "abuse_score": (_metric_re(r"(?<!ASN)(?<!公司)滥用得分\(越低越好\)"), evaluate_ip_risk_score),
}

DESCRIBED_METRICS: Dict[str, "re.Pattern[str]"] = {
    "asn_abuse_score": _described_metric_re(r"ASN滥用得分\(越低越好\)"),
    "company_abuse_score": _described_metric_re(r"公司滥用得分\(越低越好\)"),
}

IPV6_SCORE_FIELDS = ("fraud_score", "abuse_score")


def parse_database_sources(raw: Optional[str]) -> List[str]:
    """把 "0 5 A" 或 "[0 5 A]" 拆分为来源编号列表（保持输入顺序）"""
    if not raw:
        return []
    cleaned = re.sub(r"[\[\]]", "", raw).strip()
    return [s for s in cleaned.split() if s]


def _number(raw: str):
    return float(raw) if "." in raw else int(raw)


def default_databases() -> List[DatabaseSource]:
    """解析不到数据库说明时使用的默认 18 个数据库"""
    return [
        DatabaseSource(id=db_id, name=f"{key}数据库", url=url, description=description)
        for db_id, (key, (url, description)) in zip(DEFAULT_DATABASE_IDS, KNOWN_DATABASES.items())
    ]


def parse_databases(text: str) -> List[DatabaseSource]:
    """解析数据库编号说明（格式：ipinfo数据库  [0] | scamalytics数据库 [1] | ...）"""
    legend = LEGEND_RE.search(text)
    if not legend:
        return []

    databases = []
    for line in legend.group(0).split("\n"):
        if "[" not in line or "]" not in line:
            continue
        for key, db_id in LEGEND_ENTRY_RE.findall(line):
            key = key.strip()
            url, description = KNOWN_DATABASES.get(key, ("#", "未知数据库"))
            databases.append(DatabaseSource(id=db_id, name=f"{key}数据库", url=url, description=description))
    return databases


def parse_score_metric(text: str, pattern: "re.Pattern[str]",
                       evaluator: Optional[Callable[[float], Rating]]) -> Optional[IpQualityMetric]:
    match = pattern.search(text)
    if not match:
        return None
    value = _number(match.group(1))
    return IpQualityMetric(
        value=value,
        sources=parse_database_sources(match.group(2)),
        rating=evaluator(value) if evaluator else None,
    )


def parse_described_metric(text: str, pattern: "re.Pattern[str]") -> Optional[IpQualityMetric]:
    """解析形如 "ASN滥用得分(越低越好): 0 (Very Low) [A]" 的指标"""
    match = pattern.search(text)
    if not match:
        return None
    description = match.group(2).strip()
    return IpQualityMetric(
        value=_number(match.group(1)),
        sources=parse_database_sources(match.group(3)),
        description=description,
        rating=evaluate_ip_abuse_description(description),
    )


def parse_threat_level(text: str) -> Optional[IpQualityMetric]:
    """解析威胁级别

    一行可能包含多个 "值 [来源]" 对（如 "Low [H] low [9]"）：
    以第一个值为主值，所有来源合并到该值下。
    """
    match = THREAT_LEVEL_RE.search(text)
    if not match:
        return None

    content = match.group(1).strip()
    values: List[str] = []
    sources: List[str] = []
    for value, raw_sources in THREAT_PAIR_RE.findall(content):
        values.append(value.lower())
        sources.extend(parse_database_sources(raw_sources))

    if not values:
        bare = re.match(r"[a-zA-Z]+", content)
        if not bare:
            return IpQualityMetric(value="unknown")
        values.append(bare.group(0).lower())

    primary = values[0]
    return IpQualityMetric(value=primary, sources=sources, rating=evaluate_ip_threat_level(primary))


def parse_dns_blacklist(text: str) -> Optional[DnsBlacklist]:
    match = DNS_BLACKLIST_RE.search(text)
    if not match:
        return None
    total, clean, blacklisted, other = (int(g) for g in match.groups())
    return DnsBlacklist(total_checked=total, clean=clean, blacklisted=blacklisted, other=other)


def parse_blacklist_stats(text: str) -> BlacklistStats:
    """解析黑名单记录统计（四个带来源的计数）与 DNS 黑名单统计"""
    counts = {}
    for name, pattern in BLACKLIST_RE.items():
        match = pattern.search(text)
        if match:
            counts[name] = SourcedCount(
                value=int(float(match.group(1))),
                sources=parse_database_sources(match.group(2)),
            )

    stats = BlacklistStats(**counts)
    dns = parse_dns_blacklist(text)
    if dns:
        stats.total_checked = dns.total_checked
        stats.clean_count = dns.clean
        stats.blacklisted_count = dns.blacklisted
        stats.other_count = dns.other
    return stats


def parse_security_info(text: str) -> Dict[str, SecurityInfoItem]:
    """解析安全信息块

    标签集合是开放的，任意 "标签: 值" 行都成为映射中的一项，
    值保持原始字符串，其中内嵌的来源编号由渲染器按需解析。
    """
    block = SECURITY_BLOCK_RE.search(text)
    if not block:
        return {}

    info: Dict[str, SecurityInfoItem] = {}
    for line in block.group(1).split("\n"):
        match = SECURITY_LINE_RE.match(line.strip())
        if match:
            info[match.group(1).strip()] = SecurityInfoItem(value=match.group(2).strip())
    return info


def split_ip_blocks(text: str) -> Tuple[str, str]:
    """按 "IPV4:" / "IPV6:" 拆分 IPv4 与 IPv6 结果块"""
    v4 = text.find("IPV4:")
    v6 = text.find("IPV6:")
    if v4 == -1:
        return "", (text[v6:] if v6 != -1 else "")
    if v6 == -1 or v6 < v4:
        return text[v4:], (text[v6:v4] if v6 != -1 else "")
    return text[v4:v6], text[v6:]


class IpQualityTestParser(BaseExtractor[IpQualityTest]):
    """IP 质量检测解析器"""

    section = SectionName.IP_QUALITY_TEST.value
    label = "IP质量检测"

    def default(self) -> IpQualityTest:
        return IpQualityTest()

    def parse(self, text: str) -> IpQualityTest:
        text = text.replace("\r", "")
        legend = parse_databases(text)
        ipv4_block, ipv6_block = split_ip_blocks(text)
        self.ensure_found(text, legend or ipv4_block or ipv6_block)

        google = GOOGLE_RE.search(text)
        result = IpQualityTest(
            databases=legend or default_databases(),
            ipv4=self._parse_ipv4(ipv4_block),
            ipv6=self._parse_ipv6(ipv6_block),
            google_search_viability=bool(google) and google.group(1).upper() == "YES",
        )
        logger.debug(
            f"IP 质量检测解析完成：数据库 {len(result.databases)} 个，"
            f"IPv4 安全信息 {len(result.ipv4.security_info)} 项，"
            f"IPv6 安全信息 {len(result.ipv6.security_info)} 项"
        )
        return result

    def _parse_ipv4(self, block: str) -> Ipv4Quality:
        metrics = {}
        for name, (pattern, evaluator) in SCORE_METRICS.items():
            metric = parse_score_metric(block, pattern, evaluator)
            if metric:
                metrics[name] = metric
        for name, pattern in DESCRIBED_METRICS.items():
            metric = parse_described_metric(block, pattern)
            if metric:
                metrics[name] = metric
        threat_level = parse_threat_level(block)
        if threat_level:
            metrics["threat_level"] = threat_level

        return Ipv4Quality(
            blacklist_stats=parse_blacklist_stats(block),
            security_info=parse_security_info(block),
            dns_blacklist=parse_dns_blacklist(block),
            **metrics,
        )

    def _parse_ipv6(self, block: str) -> Ipv6Quality:
        metrics = {}
        for name in IPV6_SCORE_FIELDS:
            pattern, evaluator = SCORE_METRICS[name]
            metric = parse_score_metric(block, pattern, evaluator)
            if metric:
                metrics[name] = metric
        for name, pattern in DESCRIBED_METRICS.items():
            metric = parse_described_metric(block, pattern)
            if metric:
                metrics[name] = metric

        return Ipv6Quality(
            threat_level=parse_threat_level(block),
            security_info=parse_security_info(block),
            dns_blacklist=parse_dns_blacklist(block),
            **metrics,
        )
