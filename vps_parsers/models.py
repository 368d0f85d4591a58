"""解析结果数据模型

定义解析器返回的结构化数据类型。所有模型都是 dataclass，
通过 to_dict() 转换为 camelCase 键名的字典，供外部 Markdown 渲染器使用。
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

UNKNOWN = "未知"
NOT_TESTED = "未测试"


class SectionName(str, Enum):
    """测试报告的分段名称（顺序即报告中出现的顺序）"""
    BASIC_INFO = "basicInfo"
    CPU_TEST = "cpuTest"
    MEMORY_TEST = "memoryTest"
    DISK_DD_TEST = "diskDdTest"
    DISK_FIO_TEST = "diskFioTest"
    STREAMING_TEST = "streamingTest"
    IP_QUALITY_TEST = "ipQualityTest"
    EMAIL_PORT_TEST = "emailPortTest"
    NETWORK_RETURN_TEST = "networkReturnTest"
    ROUTE_TEST = "routeTest"
    SPEED_TEST = "speedTest"


class RatingLevel(str, Enum):
    """评级等级，全序：poor < average < good < excellent"""
    POOR = "poor"
    AVERAGE = "average"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, RatingLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, RatingLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, RatingLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, RatingLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER = (RatingLevel.POOR, RatingLevel.AVERAGE, RatingLevel.GOOD, RatingLevel.EXCELLENT)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_plain(value: Any) -> Any:
    """递归地把 dataclass/枚举转换为 JSON 友好的基础类型

    dataclass 字段名转换为 camelCase，值为 None 的可选字段会被省略。
    """
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value):
        result = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if item is None:
                continue
            result[_camel(f.name)] = to_plain(item)
        return result
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass(frozen=True)
class Rating(_Serializable):
    """评级结果

    Attributes:
        level: 评级等级
        description: 人类可读的评级说明
        color: 渲染用颜色提示
        emoji: 渲染用图标提示
        score: 参与评级的原始数值（可选）
    """
    level: RatingLevel
    description: str
    color: str
    emoji: str
    score: Optional[float] = None


@dataclass(frozen=True)
class ParseError(_Serializable):
    """解析错误

    Attributes:
        section: 出错的分段标签（或 general）
        message: 错误描述
        suggestion: 可操作的修复建议
        line: 出错的行号（可选）
    """
    section: str
    message: str
    suggestion: Optional[str] = None
    line: Optional[int] = None


# ---------------------------------------------------------------- 基础信息

@dataclass
class CpuCache(_Serializable):
    l1: str = UNKNOWN
    l2: str = UNKNOWN
    l3: str = UNKNOWN


@dataclass
class UsageInfo(_Serializable):
    """形如 "已用 / 总量" 的容量信息"""
    used: str = UNKNOWN
    total: str = UNKNOWN


@dataclass
class Ipv4Info(_Serializable):
    asn: str = UNKNOWN
    location: str = UNKNOWN


@dataclass
class Ipv6Info(_Serializable):
    asn: str = UNKNOWN
    location: str = UNKNOWN
    subnet: str = UNKNOWN


@dataclass
class BasicInfo(_Serializable):
    """基础系统信息

    缺失的字段统一使用 "未知" 占位，而不是 None。
    """
    cpu_model: str = UNKNOWN
    cpu_cores: int = 1
    cpu_freq: str = UNKNOWN
    cpu_cache: CpuCache = field(default_factory=CpuCache)
    aes_ni: bool = False
    vm_support: bool = False
    memory: UsageInfo = field(default_factory=UsageInfo)
    swap: str = UNKNOWN
    disk: UsageInfo = field(default_factory=UsageInfo)
    boot_path: str = UNKNOWN
    uptime: str = UNKNOWN
    load: List[str] = field(default_factory=lambda: ["0", "0", "0"])
    system: str = UNKNOWN
    arch: str = UNKNOWN
    kernel: str = UNKNOWN
    tcp_acceleration: str = UNKNOWN
    virtualization: str = UNKNOWN
    nat_type: str = UNKNOWN
    ipv4: Ipv4Info = field(default_factory=Ipv4Info)
    ipv6: Ipv6Info = field(default_factory=Ipv6Info)


# ---------------------------------------------------------------- 硬件测试

@dataclass
class SingleCoreResult(_Serializable):
    score: int
    rating: Rating


@dataclass
class MultiCoreResult(_Serializable):
    """多核测试结果

    threads == 1 表示输入中没有多线程测试数据，渲染时应省略多核部分。
    """
    score: int
    threads: int
    rating: Rating
    efficiency: Optional[float] = None
    efficiency_rating: Optional[Rating] = None

    @property
    def has_data(self) -> bool:
        return self.threads > 1


@dataclass
class CpuTest(_Serializable):
    single_core: SingleCoreResult
    multi_core: MultiCoreResult


@dataclass
class MemorySpeed(_Serializable):
    speed: float
    rating: Rating


@dataclass
class MemoryTest(_Serializable):
    single_thread_read: MemorySpeed
    single_thread_write: MemorySpeed
    overall_rating: Optional[Rating] = None


@dataclass
class DiskDdEntry(_Serializable):
    """dd 测试中的一行（写入块 + 读取块）"""
    operation: str
    write_speed: Optional[str] = None
    read_speed: Optional[str] = None
    write_iops: Optional[str] = None
    read_iops: Optional[str] = None
    write_time: Optional[str] = None
    read_time: Optional[str] = None

    def display(self, name: str) -> str:
        """返回字段的展示值，缺失时为 N/A"""
        value = getattr(self, name)
        return value if value else "N/A"


@dataclass
class DiskDdTest(_Serializable):
    tests: List[DiskDdEntry] = field(default_factory=list)


@dataclass
class IoSample(_Serializable):
    """单个 FIO 采样：速度统一为 MB/s，IOPS 为普通计数"""
    speed: float = 0.0
    iops: float = 0.0


@dataclass
class DiskFioEntry(_Serializable):
    block_size: str
    read: IoSample = field(default_factory=IoSample)
    write: IoSample = field(default_factory=IoSample)
    total: IoSample = field(default_factory=IoSample)


@dataclass
class DiskClassification(_Serializable):
    """按 4K 速度对磁盘类型的分类"""
    disk_type: str
    rating: Rating


@dataclass
class DiskAssessment(_Serializable):
    disk_type: str
    performance_rating: Rating
    overselling_rating: Optional[Rating] = None


@dataclass
class DiskFioTest(_Serializable):
    tests: List[DiskFioEntry] = field(default_factory=list)
    assessment: Optional[DiskAssessment] = None

    def find(self, block_size: str) -> Optional[DiskFioEntry]:
        for entry in self.tests:
            if entry.block_size.lower() == block_size.lower():
                return entry
        return None


# ---------------------------------------------------------------- 流媒体

@dataclass
class StreamingStatus(_Serializable):
    service: str
    status: str


@dataclass
class CommonMediaTests(_Serializable):
    ipv4: List[StreamingStatus] = field(default_factory=list)
    ipv6: List[StreamingStatus] = field(default_factory=list)
    tiktok_region: Optional[str] = None


@dataclass
class StreamingService(_Serializable):
    name: str
    ipv4_status: str = NOT_TESTED
    ipv6_status: str = NOT_TESTED


@dataclass
class RegionRestrictionCheck(_Serializable):
    services: List[StreamingService] = field(default_factory=list)


@dataclass
class StreamingTest(_Serializable):
    common_media_tests: CommonMediaTests = field(default_factory=CommonMediaTests)
    region_restriction_check: RegionRestrictionCheck = field(default_factory=RegionRestrictionCheck)


# ---------------------------------------------------------------- IP 质量

@dataclass(frozen=True)
class DatabaseSource(_Serializable):
    """IP 质量数据库，id 为 0-9/A-Z 的单字符编号"""
    id: str
    name: str
    url: str
    description: str


@dataclass
class IpQualityMetric(_Serializable):
    """带来源的指标值

    sources 按输入中出现的顺序保存报告该值的数据库编号。
    """
    value: Union[int, float, str] = 0
    sources: List[str] = field(default_factory=list)
    rating: Optional[Rating] = None
    description: Optional[str] = None


@dataclass
class SourcedCount(_Serializable):
    value: int = 0
    sources: List[str] = field(default_factory=list)


@dataclass
class SecurityInfoItem(_Serializable):
    """安全信息条目，value 保持原始字符串，来源在渲染时再解析"""
    value: str
    sources: List[str] = field(default_factory=list)


@dataclass
class BlacklistStats(_Serializable):
    harmless_count: SourcedCount = field(default_factory=SourcedCount)
    malicious_count: SourcedCount = field(default_factory=SourcedCount)
    suspicious_count: SourcedCount = field(default_factory=SourcedCount)
    undetected_count: SourcedCount = field(default_factory=SourcedCount)
    total_checked: int = 0
    clean_count: int = 0
    blacklisted_count: int = 0
    other_count: int = 0


@dataclass
class DnsBlacklist(_Serializable):
    total_checked: int = 0
    clean: int = 0
    blacklisted: int = 0
    other: int = 0


def _zero_metric() -> IpQualityMetric:
    return IpQualityMetric(value=0)


def _unknown_metric() -> IpQualityMetric:
    return IpQualityMetric(value="unknown")


@dataclass
class Ipv4Quality(_Serializable):
    reputation: IpQualityMetric = field(default_factory=_zero_metric)
    trust_score: IpQualityMetric = field(default_factory=_zero_metric)
    vpn_score: IpQualityMetric = field(default_factory=_zero_metric)
    proxy_score: IpQualityMetric = field(default_factory=_zero_metric)
    community_votes_harmless: IpQualityMetric = field(default_factory=_zero_metric)
    community_votes_malicious: IpQualityMetric = field(default_factory=_zero_metric)
    threat_score: IpQualityMetric = field(default_factory=_zero_metric)
    fraud_score: IpQualityMetric = field(default_factory=_zero_metric)
    abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    asn_abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    company_abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    threat_level: IpQualityMetric = field(default_factory=_unknown_metric)
    blacklist_stats: BlacklistStats = field(default_factory=BlacklistStats)
    security_info: Dict[str, SecurityInfoItem] = field(default_factory=dict)
    dns_blacklist: Optional[DnsBlacklist] = None


@dataclass
class Ipv6Quality(_Serializable):
    fraud_score: IpQualityMetric = field(default_factory=_zero_metric)
    abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    asn_abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    company_abuse_score: IpQualityMetric = field(default_factory=_zero_metric)
    threat_level: Optional[IpQualityMetric] = None
    security_info: Dict[str, SecurityInfoItem] = field(default_factory=dict)
    dns_blacklist: Optional[DnsBlacklist] = None


@dataclass
class IpQualityTest(_Serializable):
    databases: List[DatabaseSource] = field(default_factory=list)
    ipv4: Ipv4Quality = field(default_factory=Ipv4Quality)
    ipv6: Ipv6Quality = field(default_factory=Ipv6Quality)
    google_search_viability: bool = False


# ---------------------------------------------------------------- 网络测试

@dataclass
class EmailPlatform(_Serializable):
    name: str
    smtp: bool = False
    smtps: bool = False
    pop3: bool = False
    pop3s: bool = False
    imap: bool = False
    imaps: bool = False


@dataclass
class EmailPortTest(_Serializable):
    platforms: List[EmailPlatform] = field(default_factory=list)


@dataclass
class NetworkReturnTest(_Serializable):
    """三网回程，行内容原样保存，结构化解析由渲染器按需完成"""
    telecom: List[str] = field(default_factory=list)
    unicom: List[str] = field(default_factory=list)
    mobile: List[str] = field(default_factory=list)


@dataclass
class RouteHop(_Serializable):
    hop_number: int
    latency: str
    location: str
    is_private: bool
    raw_line: str
    asn: Optional[str] = None
    asn_name: Optional[str] = None
    provider: Optional[str] = None


@dataclass
class RouteSummary(_Serializable):
    total_hops: int
    final_latency: float
    key_nodes: List[str]
    route_quality: RatingLevel
    has_chinese_nodes: bool


@dataclass
class Route(_Serializable):
    destination: str
    target_ip: str
    hops: List[RouteHop]
    summary: RouteSummary


@dataclass
class RouteTest(_Serializable):
    routes: List[Route] = field(default_factory=list)


@dataclass
class SpeedNode(_Serializable):
    location: str
    upload_speed: str
    download_speed: str
    latency: str
    packet_loss: Optional[str] = None


@dataclass
class SpeedTest(_Serializable):
    nodes: List[SpeedNode] = field(default_factory=list)


# ---------------------------------------------------------------- 汇总

@dataclass
class ReportMetadata(_Serializable):
    test_time: str = UNKNOWN
    total_duration: str = UNKNOWN
    version: str = UNKNOWN


@dataclass
class VpsTestResult(_Serializable):
    """完整的 VPS 测试结果（每次解析创建一次，构造后不再修改）"""
    basic_info: BasicInfo
    cpu_test: CpuTest
    memory_test: MemoryTest
    disk_dd_test: DiskDdTest
    disk_fio_test: DiskFioTest
    streaming_test: StreamingTest
    ip_quality_test: IpQualityTest
    email_port_test: EmailPortTest
    network_return_test: NetworkReturnTest
    route_test: RouteTest
    speed_test: SpeedTest
    metadata: ReportMetadata


@dataclass
class ParseOutcome(_Serializable):
    """解析入口的返回值

    Attributes:
        result: 解析结果；任一致命分段失败时为 None
        errors: 按发生顺序收集的错误（成功时也可能非空）
    """
    result: Optional[VpsTestResult]
    errors: List[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.to_dict() if self.result is not None else None,
            "errors": [e.to_dict() for e in self.errors],
        }
