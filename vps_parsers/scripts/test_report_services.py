#!/usr/bin/env python
"""测试解析服务抽象层

验证本地服务的接口实现、字节解码与文件输入。
"""

import sys

import pytest

from vps_parsers.service_interface import ReportServiceInterface
from vps_parsers.local_service import LocalReportService


def test_service_interface():
    """测试服务接口抽象层"""
    print("=" * 60)
    print("测试解析服务抽象层")
    print("=" * 60)

    # 测试 1：验证接口继承
    print("\n[测试 1] 验证接口继承")
    assert issubclass(LocalReportService, ReportServiceInterface)
    print("✅ LocalReportService 实现了 ReportServiceInterface")

    # 测试 2：验证方法签名
    print("\n[测试 2] 验证方法签名")
    service = LocalReportService()
    for method in ("parse_text", "parse_bytes", "parse_file"):
        assert hasattr(service, method)
    print("✅ parse_text() / parse_bytes() / parse_file() 均已实现")


def test_parse_text_response(sample_report):
    response = LocalReportService().parse_text(sample_report)

    assert response["result"]["cpuTest"]["singleCore"]["score"] == 1234
    assert response["errors"] == []
    assert response["metadata"]["error_count"] == 0
    assert response["metadata"]["input_length"] == len(sample_report)
    assert response["metadata"]["parse_time_ms"] >= 0


def test_parse_text_fatal_response():
    response = LocalReportService().parse_text("不是融合怪输出")

    assert response["result"] is None
    assert response["metadata"]["error_count"] == len(response["errors"]) > 0


def test_parse_bytes_decodes_gb18030(sample_report):
    service = LocalReportService()
    from_bytes = service.parse_bytes(sample_report.encode("gb18030"))
    from_text = service.parse_text(sample_report)

    assert from_bytes["result"] == from_text["result"]


def test_parse_file(tmp_path, sample_report):
    report_file = tmp_path / "ecs.log"
    report_file.write_text(sample_report, encoding="utf-8")

    response = LocalReportService().parse_file(str(report_file))

    assert response["result"]["metadata"]["testTime"] == "Sun Sep 28 15:49:50 CST 2025"


def test_parse_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        LocalReportService().parse_file(str(tmp_path / "missing.log"))


if __name__ == '__main__':
    try:
        test_service_interface()
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ 测试失败: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
