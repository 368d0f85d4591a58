"""分段切分

按固定的横幅标记把融合怪脚本的完整输出切分为 11 个命名分段。
第 i 个分段的范围是第 i 个标记到第 i+1 个标记，最后一个分段以终止标记结束。
"""

from typing import Dict, Tuple

from .models import SectionName

SCRIPT_END_MARKER = "------------------------------------------------------------------------"

SECTION_MARKERS: Tuple[Tuple[SectionName, str], ...] = (
    (SectionName.BASIC_INFO, "---------------------基础信息查询--感谢所有开源项目---------------------"),
    (SectionName.CPU_TEST, "----------------------CPU测试--通过sysbench测试-------------------------"),
    (SectionName.MEMORY_TEST, "---------------------内存测试--感谢lemonbench开源-----------------------"),
    (SectionName.DISK_DD_TEST, "------------------磁盘dd读写测试--感谢lemonbench开源--------------------"),
    (SectionName.DISK_FIO_TEST, "---------------------磁盘fio读写测试--感谢yabs开源----------------------"),
    (SectionName.STREAMING_TEST, "------------流媒体解锁--基于oneclickvirt/CommonMediaTests开源-----------"),
    (SectionName.IP_QUALITY_TEST, "-------------IP质量检测--基于oneclickvirt/securityCheck使用-------------"),
    (SectionName.EMAIL_PORT_TEST, "-------------邮件端口检测--基于oneclickvirt/portchecker开源-------------"),
    (SectionName.NETWORK_RETURN_TEST, "-------------上游及三网回程--基于oneclickvirt/backtrace开源-------------"),
    (SectionName.ROUTE_TEST, "-----------------------回程路由--基于nexttrace开源----------------------"),
    (SectionName.SPEED_TEST, "--------------------自动更新测速节点列表--本脚本原创--------------------"),
)


def marker_for(section: SectionName) -> str:
    """返回分段的起始标记"""
    return dict(SECTION_MARKERS)[section]


def extract_section(text: str, start_marker: str, end_marker: str) -> str:
    """提取两个标记之间的文本

    Args:
        text: 完整的原始文本
        start_marker: 起始标记
        end_marker: 结束标记（只在起始标记之后查找）

    Returns:
        去除首尾空白的文本片段；起始标记不存在时返回空字符串，
        结束标记不存在时截取到文本末尾
    """
    start_index = text.find(start_marker)
    if start_index == -1:
        return ""

    content_start = start_index + len(start_marker)
    end_index = text.find(end_marker, content_start)
    if end_index == -1:
        return text[content_start:].strip()
    return text[content_start:end_index].strip()


def extract_sections(raw_text: str) -> Dict[SectionName, str]:
    """把原始输入切分为各个分段

    Returns:
        SectionName → 分段文本，缺失的分段为空字符串
    """
    end_markers = [marker for _, marker in SECTION_MARKERS[1:]] + [SCRIPT_END_MARKER]
    return {
        section: extract_section(raw_text, start, end)
        for (section, start), end in zip(SECTION_MARKERS, end_markers)
    }
