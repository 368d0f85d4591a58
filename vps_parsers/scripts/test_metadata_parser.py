"""测试元数据解析"""

from vps_parsers.metadata_parser import parse_metadata
from vps_parsers.models import UNKNOWN


def test_full_report_metadata(sample_report):
    metadata = parse_metadata(sample_report)

    assert metadata.version == "2025.09.28"
    assert metadata.total_duration == "3 分 25 秒"
    assert metadata.test_time == "Sun Sep 28 15:49:50 CST 2025"


def test_time_is_taken_after_duration_line():
    """系统在线时间不会被误认为测试时间"""
    raw = (
        " 系统在线时间      : 0 days, 2 hour 13 min\n"
        " 总共花费      : 1 分 2 秒\n"
        " 时间          : Mon Sep 29 10:00:00 CST 2025\n"
    )
    assert parse_metadata(raw).test_time == "Mon Sep 29 10:00:00 CST 2025"


def test_crlf_input():
    raw = "VPS融合怪版本：v1\r\n 总共花费 : 5 秒\r\n 时间 : 今天\r\n"
    metadata = parse_metadata(raw)

    assert metadata.version == "v1"
    assert metadata.total_duration == "5 秒"
    assert metadata.test_time == "今天"


def test_missing_metadata():
    metadata = parse_metadata("没有元数据")

    assert metadata.version == UNKNOWN
    assert metadata.total_duration == UNKNOWN
    assert metadata.test_time == UNKNOWN


def test_time_found_in_tail_without_duration_line():
    """没有总耗时行时，在输入末尾窗口内查找测试时间"""
    raw = "VPS融合怪版本：v1\n" + "测试输出\n" * 50 + " 时间          : Mon Sep 29 10:00:00 CST 2025\n"

    metadata = parse_metadata(raw)

    assert metadata.total_duration == UNKNOWN
    assert metadata.test_time == "Mon Sep 29 10:00:00 CST 2025"


def test_uptime_before_tail_window_is_ignored():
    """末尾窗口之前的 系统在线时间 不会被当作测试时间"""
    raw = " 系统在线时间      : 0 days, 2 hour 13 min\n" + "x" * 1200 + "\n 时间 : Mon Sep 29\n"
    assert parse_metadata(raw).test_time == "Mon Sep 29"

    no_time = " 系统在线时间      : 0 days, 2 hour 13 min\n" + "x" * 1200 + "\n"
    assert parse_metadata(no_time).test_time == UNKNOWN
