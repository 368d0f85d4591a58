"""测试公共夹具

提供一份完整的融合怪输出样例，以及按分段拼装报告的辅助函数。
"""

import os

# 测试时只输出到控制台，不写日志文件
os.environ.setdefault("VPS_PARSER_LOG_TO_FILE", "false")

import pytest

from vps_parsers.models import SectionName
from vps_parsers.sections import SCRIPT_END_MARKER, SECTION_MARKERS

BASIC_INFO = """\
 CPU 型号          : AMD EPYC 7763 64-Core Processor
 CPU 核心数        : 2
 CPU 频率          : 2445.406 MHz
 CPU 缓存          : L1: 128.00 KB / L2: 1.00 MB / L3: 32.00 MB
 AES-NI指令集      : ✔ Enabled
 VM-x/AMD-V支持    : ✔ Enabled
 内存              : 312.45 MiB / 1.92 GiB
 Swap              : [ no swap partition or swap file detected ]
 硬盘空间          : 2.51 GiB / 19.52 GiB
 启动盘路径        : /dev/vda1
 系统在线时间      : 0 days, 2 hour 13 min
 负载              : 0.08, 0.12, 0.09
 系统              : Debian GNU/Linux 12 (bookworm) (x86_64)
 架构              : x86_64 (64 Bit)
 内核              : 6.1.0-25-amd64
 TCP加速方式       : bbr
 虚拟化架构        : KVM
 NAT类型           : Full Cone
 IPV4 ASN          : AS215304 Lain
 IPV4 位置         : Tokyo / Tokyo / JP
 IPV6 ASN          : AS215304 Lain
 IPV6 位置         : Tokyo / Tokyo / JP
 IPV6 子网掩码     : /48"""

CPU_TEST = """\
 -> CPU 测试中 (Fast Mode, 1-Pass @ 5sec)
 1 线程测试(单核)得分:          1234 Scores
 2 线程测试(多核)得分:          2400 Scores"""

MEMORY_TEST = """\
 -> 内存测试 Test (Fast Mode, 1-Pass @ 5sec)
 单线程读测试:          45000.12 MB/s
 单线程写测试:          32000.56 MB/s"""

DISK_DD_TEST = """\
 测试操作                写速度                                  读速度
 100MB-4K Block          21.3 MB/s (5199 IOPS, 4.92s)            31.1 MB/s (7593 IOPS, 3.37s)
 1GB-1M Block            1.1 GB/s (1049 IOPS, 0.95s)             2.3 GB/s (2222 IOPS, 0.45s)"""

DISK_FIO_TEST = """\
Block Size | 4k            (IOPS) | 64k           (IOPS)
  ------   | ---            ----  | ----           ----
Read       | 150.65 MB/s  (37.6k) | 1.20 GB/s    (18.8k)
Write      | 151.05 MB/s  (37.7k) | 1.21 GB/s    (18.9k)
Total      | 301.71 MB/s  (75.4k) | 2.41 GB/s    (37.7k)
           |                      |
Block Size | 512k          (IOPS) | 1m            (IOPS)
  ------   | ---            ----  | ----           ----
Read       | 2.10 GB/s     (4.1k) | 2.30 GB/s     (2.2k)
Write      | 2.21 GB/s     (4.3k) | 2.45 GB/s     (2.4k)
Total      | 4.31 GB/s     (8.4k) | 4.75 GB/s     (4.6k)"""

STREAMING_TEST = """\
以下为IPV4网络测试
============[ Multination ]============
 Dazn:                                  Yes (Region: US)
 Disney+:                               No
 Netflix:                               Originals Only
 YouTube Premium:                       Yes (Region: JP)
=======================================
以下为IPV6网络测试
============[ Multination ]============
 Dazn:                                  Failed (Network Connection)
 Netflix:                               Yes (Region: JP)
=======================================
 Tiktok Region:                         【JP】"""

IP_QUALITY_TEST = """\
数据仅作参考，不代表100%准确，如果和实际情况不一致请手动查询多个数据库比对
以下为各数据库编号，输出结果后将自带数据库来源对应的编号
ipinfo数据库  [0] | scamalytics数据库 [1] | virustotal数据库 [2] | abuseipdb数据库 [3] | ip2location数据库   [4]
ip-api数据库  [5] | ipwhois数据库     [6] | ipregistry数据库 [7] | ipdata数据库    [8] | db-ip数据库         [9]
ipapiis数据库 [A] | ipapicom数据库    [B] | bigdatacloud数据库 [C] | dkly数据库     [D] | ipqualityscore数据库 [E]
IPV4:
安全得分:
声誉(越高越好): 85 [0 5 A]
信任得分(越高越好): 0 [8]
VPN得分(越低越好): 0 [8]
代理得分(越低越好): 0 [8]
社区投票-无害: 0 [2]
社区投票-恶意: 0 [2]
威胁得分(越低越好): 0 [8]
欺诈得分(越低越好): 15 [1 E]
滥用得分(越低越好): 0 [3]
ASN滥用得分(越低越好): 0 (Very Low) [A]
公司滥用得分(越低越好): 0.001 (Very Low) [A]
威胁级别: Low [H] low [9]
黑名单记录统计:(有多少黑名单网站有记录):
无害记录数: 0 [2]  恶意记录数: 0 [2]  可疑记录数: 0 [2]  无记录数: 94 [2]
安全信息:
使用类型: hosting[0 7 9 A B C D E] business[8]
公司类型: hosting[0 A]
是否云提供商: Yes[7 D]
是否数据中心: Yes[0 1 A C] No[5 8]
是否移动设备: No[A C]
DNS-黑名单: 314(Total_Check) 0(Clean) 8(Blacklisted) 306(Other)
IPV6:
安全得分:
欺诈得分(越低越好): 0 [E]
滥用得分(越低越好): 0 [3]
ASN滥用得分(越低越好): 0 (Very Low) [A]
公司滥用得分(越低越好): 0 (Very Low) [A]
安全信息:
使用类型: hosting[0 A]
是否数据中心: Yes[A]
DNS-黑名单: 314(Total_Check) 0(Clean) 0(Blacklisted) 314(Other)
Google搜索可行性：YES"""

EMAIL_PORT_TEST = """\
Platform  SMTP  SMTPS POP3  POP3S IMAP  IMAPS
QQ        ✔     ✘     ✔     ✔     ✔     ✔
163       ✔     ✔     ✔     ✔     ✔     ✔
Gmail     ✘     ✔     ✘     ✔     ✘     ✔"""

NETWORK_RETURN_TEST = """\
国家: JP 城市: Tokyo 服务商: AS215304 Lain
北京电信 219.141.140.10  电信163    [普通线路]
北京联通 202.106.195.68  联通4837   [普通线路]
北京移动 221.179.155.161 移动CMI    [普通线路]
准确线路自行查看详细路由，本测试结果仅作参考"""

ROUTE_TEST = """\
依次测试电信/联通/移动经过的地区及线路，核心程序来自nexttrace，请知悉!
广州电信 58.60.188.222
0.27 ms AS215304 日本 东京都 东京 lain.sh
1.05 ms * RFC1918
45.20 ms AS4134 [CHINANET-BB] 中国 广东 广州 chinatelecom.cn
52.80 ms AS4134 [CHINANET-BB] 中国 广东 广州 chinatelecom.cn
广州联通 210.21.196.6
0.31 ms AS215304 日本 东京都 东京 lain.sh
60.10 ms AS4837 [CU169-BACKBONE] 中国 广东 广州 chinaunicom.cn
广州移动 120.196.165.24
0.30 ms AS215304 日本 东京都 东京 lain.sh
80.50 ms AS58453 [CMI-INT] 中国 香港 chinamobile.com
95.00 ms AS9808 [CMNET] 中国 广东 广州 chinamobile.com"""

SPEED_TEST = """\
位置            上传速度        下载速度        延迟      丢包率
Speedtest.net   912.50 Mbps     935.20 Mbps     0.45 ms   0.0%
日本东京        850.10 Mbps     901.33 Mbps     1.20 ms   NULL"""

SAMPLE_SECTIONS = {
    SectionName.BASIC_INFO: BASIC_INFO,
    SectionName.CPU_TEST: CPU_TEST,
    SectionName.MEMORY_TEST: MEMORY_TEST,
    SectionName.DISK_DD_TEST: DISK_DD_TEST,
    SectionName.DISK_FIO_TEST: DISK_FIO_TEST,
    SectionName.STREAMING_TEST: STREAMING_TEST,
    SectionName.IP_QUALITY_TEST: IP_QUALITY_TEST,
    SectionName.EMAIL_PORT_TEST: EMAIL_PORT_TEST,
    SectionName.NETWORK_RETURN_TEST: NETWORK_RETURN_TEST,
    SectionName.ROUTE_TEST: ROUTE_TEST,
    SectionName.SPEED_TEST: SPEED_TEST,
}

HEADER = "VPS融合怪版本：2025.09.28\nShell项目地址：https://github.com/spiritLHLS/ecs"

FOOTER = """\
 总共花费      : 3 分 25 秒
 时间          : Sun Sep 28 15:49:50 CST 2025
------------------------------------------------------------------------"""


def assemble_report(sections, skip=(), header=HEADER, footer=FOOTER):
    """按固定顺序拼装报告

    Args:
        sections: SectionName → 分段正文，缺失的分段只输出标记
        skip: 不输出标记的分段（模拟标记缺失）
    """
    parts = [header]
    for section, marker in SECTION_MARKERS:
        if section in skip:
            continue
        parts.append(marker)
        body = sections.get(section, "")
        if body:
            parts.append(body)
    parts.append(SCRIPT_END_MARKER)
    parts.append(footer)
    return "\n".join(parts) + "\n"


@pytest.fixture
def sample_sections():
    return dict(SAMPLE_SECTIONS)


@pytest.fixture
def sample_report():
    return assemble_report(SAMPLE_SECTIONS)


@pytest.fixture
def build_report():
    return assemble_report
