"""基础信息解析器

解析服务器的基础硬件和系统信息（CPU、内存、硬盘、系统、IP 归属等）。
该分段为致命分段：解析过程中的意外异常会终止整个解析，
单个字段缺失或无法识别时使用占位值。
"""

import logging
import re
from typing import List

from .base import BaseExtractor
from .models import BasicInfo, CpuCache, Ipv4Info, Ipv6Info, SectionName, UNKNOWN, UsageInfo

logger = logging.getLogger(__name__)

_SEP = r"\s*[:：]\s*"

PATTERNS = {
    "cpu_model": re.compile(r"CPU 型号" + _SEP + r"(.+)"),
    "cpu_cores": re.compile(r"CPU 核心数" + _SEP + r"(.*)"),
    "cpu_freq": re.compile(r"CPU 频率" + _SEP + r"(.+)"),
    "cache_l1": re.compile(r"CPU 缓存" + _SEP + r".*L1:\s*([^/]+)"),
    "cache_l2": re.compile(r"CPU 缓存" + _SEP + r".*L2:\s*([^/]+)"),
    "cache_l3": re.compile(r"CPU 缓存" + _SEP + r".*L3:\s*(.+)"),
    "aes_ni": re.compile(r"AES-NI指令集" + _SEP + r"(.+)"),
    "vm_support": re.compile(r"VM-x/AMD-V支持" + _SEP + r"(.+)"),
    "memory_used": re.compile(r"内存" + _SEP + r"([^/]+)"),
    "memory_total": re.compile(r"内存" + _SEP + r"[^/]+/\s*(.+)"),
    "swap": re.compile(r"Swap" + _SEP + r"(.+)"),
    "disk_used": re.compile(r"硬盘空间" + _SEP + r"([^/]+)"),
    "disk_total": re.compile(r"硬盘空间" + _SEP + r"[^/]+/\s*(.+)"),
    "boot_path": re.compile(r"启动盘路径" + _SEP + r"(.+)"),
    "uptime": re.compile(r"系统在线时间" + _SEP + r"(.+)"),
    "load": re.compile(r"负载" + _SEP + r"(.+)"),
    "system": re.compile(r"(?<!操作)系统" + _SEP + r"(.+)"),
    "arch": re.compile(r"(?<!虚拟化)架构" + _SEP + r"(.+)"),
    "kernel": re.compile(r"内核" + _SEP + r"(.+)"),
    "tcp_acceleration": re.compile(r"TCP加速方式" + _SEP + r"(.+)"),
    "virtualization": re.compile(r"虚拟化架构" + _SEP + r"(.+)"),
    "nat_type": re.compile(r"NAT类型" + _SEP + r"(.+)"),
    "ipv4_asn": re.compile(r"IPV4 ASN" + _SEP + r"(.+)"),
    "ipv4_location": re.compile(r"IPV4 位置" + _SEP + r"(.+)"),
    "ipv6_asn": re.compile(r"IPV6 ASN" + _SEP + r"(.+)"),
    "ipv6_location": re.compile(r"IPV6 位置" + _SEP + r"(.+)"),
    "ipv6_subnet": re.compile(r"IPV6 子网掩码" + _SEP + r"(.+)"),
}


class BasicInfoParser(BaseExtractor[BasicInfo]):
    """基础信息解析器

    每个字段按标签行查找，缺失时使用 "未知" 占位；
    布尔字段根据 ✔ 符号或 enabled 字样判定。
    """

    section = SectionName.BASIC_INFO.value
    label = "基础信息"
    fatal = True

    def default(self) -> BasicInfo:
        return BasicInfo()

    def parse(self, text: str) -> BasicInfo:
        lines = self.split_lines(text)

        def value(key: str, default: str = UNKNOWN) -> str:
            match = self.search_lines(lines, PATTERNS[key])
            return match.group(1).strip() if match else default

        def flag(key: str) -> bool:
            match = self.search_lines(lines, PATTERNS[key])
            if not match:
                return False
            raw = match.group(1)
            return "✔" in raw or "enabled" in raw.lower()

        return BasicInfo(
            cpu_model=value("cpu_model"),
            cpu_cores=self._parse_cores(lines),
            cpu_freq=value("cpu_freq"),
            cpu_cache=CpuCache(l1=value("cache_l1"), l2=value("cache_l2"), l3=value("cache_l3")),
            aes_ni=flag("aes_ni"),
            vm_support=flag("vm_support"),
            memory=UsageInfo(used=value("memory_used"), total=value("memory_total")),
            swap=value("swap"),
            disk=UsageInfo(used=value("disk_used"), total=value("disk_total")),
            boot_path=value("boot_path"),
            uptime=value("uptime"),
            load=self._split_load(value("load", "0, 0, 0")),
            system=value("system"),
            arch=value("arch"),
            kernel=value("kernel"),
            tcp_acceleration=value("tcp_acceleration"),
            virtualization=value("virtualization"),
            nat_type=value("nat_type"),
            ipv4=Ipv4Info(asn=value("ipv4_asn"), location=value("ipv4_location")),
            ipv6=Ipv6Info(
                asn=value("ipv6_asn"),
                location=value("ipv6_location"),
                subnet=value("ipv6_subnet"),
            ),
        )

    def _parse_cores(self, lines: List[str]) -> int:
        """CPU 核心数，缺失或无法识别时记为 1"""
        match = self.search_lines(lines, PATTERNS["cpu_cores"])
        digits = re.match(r"\d+", match.group(1).strip()) if match else None
        if not digits:
            if match:
                logger.warning(f"无法识别的 CPU 核心数 {match.group(1).strip()!r}，按 1 处理")
            return 1
        return int(digits.group(0))

    @staticmethod
    def _split_load(raw: str) -> List[str]:
        return [part.strip() for part in raw.split(",")]
