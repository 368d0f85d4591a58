"""硬件性能测试解析器

解析 CPU（sysbench）、内存（lemonbench）、磁盘 dd 与磁盘 fio（yabs）测试结果。

- CPU、内存为致命分段
- 磁盘 dd、fio 为软失败分段，失败时返回空结果
"""

import logging
import re
from typing import List, Optional

from .base import BaseExtractor, SectionParseError
from .evaluators import (
    evaluate_cpu_efficiency,
    evaluate_cpu_multi_core,
    evaluate_cpu_single_core,
    evaluate_disk_4k_performance,
    evaluate_disk_overselling,
    evaluate_memory_overall,
    evaluate_memory_read,
    evaluate_memory_write,
)
from .models import (
    CpuTest,
    DiskAssessment,
    DiskDdEntry,
    DiskDdTest,
    DiskFioEntry,
    DiskFioTest,
    IoSample,
    MemorySpeed,
    MemoryTest,
    MultiCoreResult,
    SectionName,
    SingleCoreResult,
)

logger = logging.getLogger(__name__)

SINGLE_THREAD_RE = re.compile(r"(?<!\d)1\s*线程测试.*?(\d+)\s+Scores")
MULTI_THREAD_RE = re.compile(r"(?<!\d)(\d+)\s*线程测试.*?(\d+)\s+Scores")

MEMORY_READ_LABEL = "单线程读测试"
MEMORY_WRITE_LABEL = "单线程写测试"
MEMORY_SPEED_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*MB/s")

DD_OPERATION_RE = re.compile(r"(.+?Block)")
DD_GROUP_RE = re.compile(r"([0-9.]+\s*[GM]?B/s\s*\([^)]+\))")
DD_SPEED_RE = re.compile(r"([0-9.]+\s*[GM]?B/s)")
DD_IOPS_RE = re.compile(r"\(([\d.]+)\s*IOPS")
DD_TIME_RE = re.compile(r"([0-9.]+s)\)")

FIO_HEADER_RE = re.compile(r"Block Size\s*\|\s*([^|]+)\s*\|\s*([^|]+)")
FIO_ROW_RE = re.compile(
    r"(Read|Write|Total)\s*\|\s*([0-9.]+\s*[GMK]?B/s)\s*\(([0-9.]+k?)\)"
    r"\s*\|\s*([0-9.]+\s*[GMK]?B/s)\s*\(([0-9.]+k?)\)"
)


class CpuTestParser(BaseExtractor[CpuTest]):
    """CPU 测试解析器

    区分 "1 线程测试" 与 "N 线程测试"（N > 1）。没有多线程数据时
    threads 保持为 1，作为 "无多核数据" 的标记。
    """

    section = SectionName.CPU_TEST.value
    label = "CPU测试"
    fatal = True

    def default(self) -> CpuTest:
        return build_cpu_test(0, 0, 1)

    def parse(self, text: str) -> CpuTest:
        single_score: Optional[int] = None
        multi_score = 0
        thread_count = 1

        for line in self.split_lines(text):
            single = SINGLE_THREAD_RE.search(line)
            if single:
                single_score = int(single.group(1))
                continue

            multi = MULTI_THREAD_RE.search(line)
            if multi and int(multi.group(1)) > 1:
                thread_count = int(multi.group(1))
                multi_score = int(multi.group(2))

        if single_score is None:
            raise SectionParseError(self.section, "未找到单线程测试得分（1 线程测试 ... Scores）")

        return build_cpu_test(single_score, multi_score, thread_count)


def build_cpu_test(single_score: int, multi_score: int, thread_count: int) -> CpuTest:
    """根据得分组装 CPU 测试结果，单核得分为 0 时效率记为 0"""
    efficiency = None
    efficiency_rating = None
    if thread_count > 1:
        efficiency = multi_score / (single_score * thread_count) if single_score > 0 else 0.0
        efficiency_rating = evaluate_cpu_efficiency(efficiency)

    return CpuTest(
        single_core=SingleCoreResult(score=single_score, rating=evaluate_cpu_single_core(single_score)),
        multi_core=MultiCoreResult(
            score=multi_score,
            threads=thread_count,
            rating=evaluate_cpu_multi_core(multi_score, single_score, thread_count),
            efficiency=efficiency,
            efficiency_rating=efficiency_rating,
        ),
    )


class MemoryTestParser(BaseExtractor[MemoryTest]):
    """内存测试解析器

    单线程读/写速度（MB/s）各自独立，缺失时为 0。
    标签行存在但无法解析出速度时视为结构性错误。
    """

    section = SectionName.MEMORY_TEST.value
    label = "内存测试"
    fatal = True

    def default(self) -> MemoryTest:
        return build_memory_test(0.0, 0.0)

    def parse(self, text: str) -> MemoryTest:
        read_speed = 0.0
        write_speed = 0.0

        for number, line in enumerate(text.replace("\r", "").split("\n"), start=1):
            if MEMORY_READ_LABEL in line:
                read_speed = self._speed(line, MEMORY_READ_LABEL, number)
            elif MEMORY_WRITE_LABEL in line:
                write_speed = self._speed(line, MEMORY_WRITE_LABEL, number)

        return build_memory_test(read_speed, write_speed)

    def _speed(self, line: str, label: str, number: int) -> float:
        match = MEMORY_SPEED_RE.search(line, line.index(label) + len(label))
        if not match:
            raise SectionParseError(self.section, f"{label}行缺少 MB/s 速度: {line.strip()!r}", line=number)
        return float(match.group(1))


def build_memory_test(read_speed: float, write_speed: float) -> MemoryTest:
    return MemoryTest(
        single_thread_read=MemorySpeed(speed=read_speed, rating=evaluate_memory_read(read_speed)),
        single_thread_write=MemorySpeed(speed=write_speed, rating=evaluate_memory_write(write_speed)),
        overall_rating=evaluate_memory_overall(read_speed, write_speed),
    )


class DiskDdTestParser(BaseExtractor[DiskDdTest]):
    """磁盘 dd 测试解析器

    每行包含两个 "速度 (IOPS, 耗时)" 组，第一个为写入，第二个为读取。
    """

    section = SectionName.DISK_DD_TEST.value
    label = "磁盘DD测试"

    def default(self) -> DiskDdTest:
        return DiskDdTest()

    def parse(self, text: str) -> DiskDdTest:
        tests: List[DiskDdEntry] = []

        for line in self.split_lines(text):
            if "Block" not in line or ("MB/s" not in line and "GB/s" not in line):
                continue

            operation = DD_OPERATION_RE.search(line)
            groups = DD_GROUP_RE.findall(line)
            if not operation or len(groups) < 2:
                continue

            write_info, read_info = groups[0], groups[1]
            tests.append(DiskDdEntry(
                operation=operation.group(1).strip(),
                write_speed=_group(DD_SPEED_RE, write_info),
                write_iops=_iops(write_info),
                write_time=_group(DD_TIME_RE, write_info),
                read_speed=_group(DD_SPEED_RE, read_info),
                read_iops=_iops(read_info),
                read_time=_group(DD_TIME_RE, read_info),
            ))

        self.ensure_found(text, tests)
        return DiskDdTest(tests=tests)


def _group(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1) if match else None


def _iops(text: str) -> Optional[str]:
    value = _group(DD_IOPS_RE, text)
    return f"{value} IOPS" if value else None


class DiskFioTestParser(BaseExtractor[DiskFioTest]):
    """磁盘 fio 测试解析器

    yabs 每个表头行包含两个块大小，随后的 Read/Write/Total 行各有两列
    "速度 (IOPS)"。遇到新的表头或分段结束时把缓冲的一组输出为两行结果。
    速度统一换算为 MB/s，IOPS 的 k 后缀换算为普通计数。
    """

    section = SectionName.DISK_FIO_TEST.value
    label = "磁盘FIO测试"

    def default(self) -> DiskFioTest:
        return DiskFioTest()

    def parse(self, text: str) -> DiskFioTest:
        tests: List[DiskFioEntry] = []
        block_sizes: List[str] = []
        samples = {"Read": [], "Write": [], "Total": []}

        def flush():
            if not block_sizes or not samples["Read"]:
                return
            for i, block_size in enumerate(block_sizes[:2]):
                tests.append(DiskFioEntry(
                    block_size=block_size,
                    read=_pick(samples["Read"], i),
                    write=_pick(samples["Write"], i),
                    total=_pick(samples["Total"], i),
                ))

        for line in self.split_lines(text):
            header = FIO_HEADER_RE.search(line)
            if header:
                flush()
                block_sizes = [_clean_block_size(header.group(1)), _clean_block_size(header.group(2))]
                samples = {"Read": [], "Write": [], "Total": []}
                continue

            row = FIO_ROW_RE.search(line)
            if row:
                samples[row.group(1)] = [
                    IoSample(speed=normalize_speed(row.group(2)), iops=normalize_iops(row.group(3))),
                    IoSample(speed=normalize_speed(row.group(4)), iops=normalize_iops(row.group(5))),
                ]

        flush()
        self.ensure_found(text, tests)

        result = DiskFioTest(tests=tests)
        result.assessment = assess_disk(result)
        return result


def _clean_block_size(raw: str) -> str:
    return re.sub(r"\s*\(IOPS\)", "", raw.strip()).strip()


def _pick(samples: List[IoSample], index: int) -> IoSample:
    return samples[index] if index < len(samples) else IoSample()


def normalize_speed(raw: str) -> float:
    """把 "1.20 GB/s"、"150.65 MB/s" 等统一换算为 MB/s"""
    number = float(re.match(r"[0-9.]+", raw.strip()).group(0))
    if "GB" in raw:
        return number * 1000
    if "KB" in raw:
        return number / 1000
    return number


def normalize_iops(raw: str) -> float:
    """把 "37.6k" 换算为 37600"""
    raw = raw.strip()
    if raw.endswith("k"):
        return float(raw[:-1]) * 1000
    return float(raw)


def assess_disk(fio: DiskFioTest) -> Optional[DiskAssessment]:
    """两阶段磁盘评估：先用 4K 判定类型，再按类型判断 1M 是否超售"""
    test_4k = fio.find("4k")
    if test_4k is None:
        return None

    classification = evaluate_disk_4k_performance(test_4k.read.speed, test_4k.write.speed)
    test_1m = fio.find("1m")
    overselling = (
        evaluate_disk_overselling(test_1m.total.speed, classification.disk_type)
        if test_1m is not None else None
    )
    return DiskAssessment(
        disk_type=classification.disk_type,
        performance_rating=classification.rating,
        overselling_rating=overselling,
    )
