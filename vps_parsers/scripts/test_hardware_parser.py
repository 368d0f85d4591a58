"""测试硬件性能解析器（CPU、内存、磁盘 dd/fio）"""

import pytest

from vps_parsers.base import SectionParseError
from vps_parsers.evaluators import DISK_TYPE_SSD
from vps_parsers.hardware_parser import (
    CpuTestParser,
    DiskDdTestParser,
    DiskFioTestParser,
    MemoryTestParser,
    normalize_iops,
    normalize_speed,
)
from vps_parsers.models import RatingLevel, SectionName


def test_cpu_single_and_multi(sample_sections):
    cpu = CpuTestParser().parse(sample_sections[SectionName.CPU_TEST])

    assert cpu.single_core.score == 1234
    assert cpu.single_core.rating.level is RatingLevel.GOOD
    assert cpu.multi_core.score == 2400
    assert cpu.multi_core.threads == 2
    assert cpu.multi_core.has_data
    assert cpu.multi_core.efficiency == pytest.approx(2400 / 2468)
    assert cpu.multi_core.efficiency_rating.level is RatingLevel.GOOD


def test_cpu_without_multi_thread_line():
    """没有 N>1 线程测试时 threads 保持为 1，且不计算效率"""
    cpu = CpuTestParser().parse(" 1 线程测试(单核)得分:          1234 Scores")

    assert cpu.multi_core.threads == 1
    assert not cpu.multi_core.has_data
    assert cpu.multi_core.efficiency is None
    assert "efficiency" not in cpu.to_dict()["multiCore"]


def test_cpu_does_not_mistake_eleven_threads_for_single():
    text = "11 线程测试(多核)得分: 9000 Scores\n 1 线程测试(单核)得分: 1000 Scores"
    cpu = CpuTestParser().parse(text)

    assert cpu.single_core.score == 1000
    assert cpu.multi_core.threads == 11
    assert cpu.multi_core.score == 9000


def test_cpu_zero_single_score_gives_zero_efficiency():
    cpu = CpuTestParser().parse("1 线程测试(单核)得分: 0 Scores\n4 线程测试(多核)得分: 100 Scores")
    assert cpu.multi_core.efficiency == 0.0


def test_cpu_missing_single_score_is_fatal():
    errors = []
    with pytest.raises(SectionParseError) as exc_info:
        CpuTestParser().extract("sysbench 未能运行", errors)

    assert exc_info.value.section == "cpuTest"
    assert len(errors) == 1
    assert errors[0].section == "cpuTest"
    assert errors[0].message == "CPU测试结果解析失败"


def test_memory_read_write(sample_sections):
    memory = MemoryTestParser().parse(sample_sections[SectionName.MEMORY_TEST])

    assert memory.single_thread_read.speed == pytest.approx(45000.12)
    assert memory.single_thread_write.speed == pytest.approx(32000.56)
    assert memory.overall_rating.level is RatingLevel.EXCELLENT


def test_memory_missing_line_defaults_to_zero():
    memory = MemoryTestParser().parse(" 单线程读测试:          25000.00 MB/s")

    assert memory.single_thread_read.speed == 25000.0
    assert memory.single_thread_write.speed == 0.0
    assert memory.overall_rating.level is RatingLevel.POOR


def test_memory_label_without_speed_is_fatal():
    errors = []
    with pytest.raises(SectionParseError):
        MemoryTestParser().extract(" 单线程读测试:          N/A", errors)
    assert [e.section for e in errors] == ["memoryTest"]


def test_memory_error_records_line_number():
    errors = []
    text = " -> 内存测试 Test\n\n 单线程读测试:          40000.00 MB/s\n 单线程写测试:          --"
    with pytest.raises(SectionParseError) as exc_info:
        MemoryTestParser().extract(text, errors)

    assert exc_info.value.line == 4
    assert errors[0].line == 4
    assert errors[0].to_dict()["line"] == 4


def test_disk_dd_write_then_read(sample_sections):
    dd = DiskDdTestParser().parse(sample_sections[SectionName.DISK_DD_TEST])

    assert len(dd.tests) == 2
    first = dd.tests[0]
    assert first.operation == "100MB-4K Block"
    assert first.write_speed == "21.3 MB/s"
    assert first.write_iops == "5199 IOPS"
    assert first.write_time == "4.92s"
    assert first.read_speed == "31.1 MB/s"
    assert first.read_iops == "7593 IOPS"
    assert first.read_time == "3.37s"
    assert dd.tests[1].write_speed == "1.1 GB/s"


def test_disk_dd_missing_iops_displays_na():
    dd = DiskDdTestParser().parse(" 100MB-4K Block   21.3 MB/s (4.92s)   31.1 MB/s (3.37s)")

    entry = dd.tests[0]
    assert entry.write_iops is None
    assert entry.display("write_iops") == "N/A"
    assert entry.display("read_time") == "3.37s"


def test_disk_dd_unrecognised_section_is_soft_failure():
    errors = []
    dd = DiskDdTestParser().extract("dd: 写入失败", errors)

    assert dd.tests == []
    assert [e.section for e in errors] == ["diskDdTest"]


def test_fio_unit_normalisation():
    text = (
        "Block Size | 4k            (IOPS) | 64k           (IOPS)\n"
        "Read       | 150.65 MB/s  (37.6k) | 1.20 GB/s    (18.8k)\n"
        "Write      | 151.05 MB/s  (37.7k) | 1.21 GB/s    (18.9k)\n"
        "Total      | 1.20GB/s (150k)      | 2.41 GB/s    (37.7k)\n"
    )
    fio = DiskFioTestParser().parse(text)

    total_4k = fio.find("4k").total
    assert total_4k.speed == pytest.approx(1200)
    assert total_4k.iops == pytest.approx(150000)


def test_fio_flushes_every_header_group(sample_sections):
    fio = DiskFioTestParser().parse(sample_sections[SectionName.DISK_FIO_TEST])

    assert [t.block_size for t in fio.tests] == ["4k", "64k", "512k", "1m"]
    assert fio.find("64k").read.speed == pytest.approx(1200)
    assert fio.find("64k").read.iops == pytest.approx(18800)
    assert fio.find("1m").total.speed == pytest.approx(4750)


def test_fio_assessment(sample_sections):
    fio = DiskFioTestParser().parse(sample_sections[SectionName.DISK_FIO_TEST])

    assert fio.assessment.disk_type == DISK_TYPE_SSD
    assert fio.assessment.performance_rating.level is RatingLevel.GOOD
    assert fio.assessment.overselling_rating.level is RatingLevel.GOOD


def test_fio_empty_section_has_no_error():
    errors = []
    fio = DiskFioTestParser().extract("", errors)

    assert fio.tests == []
    assert fio.assessment is None
    assert errors == []


@pytest.mark.parametrize("raw, expected", [
    ("150.65 MB/s", 150.65),
    ("1.20 GB/s", 1200),
    ("512 KB/s", 0.512),
])
def test_normalize_speed(raw, expected):
    assert normalize_speed(raw) == pytest.approx(expected)


def test_normalize_iops():
    assert normalize_iops("37.6k") == pytest.approx(37600)
    assert normalize_iops("812") == 812
