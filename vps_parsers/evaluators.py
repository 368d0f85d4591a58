"""性能评估器

纯函数集合：根据阈值把测量值映射为 Rating。相同输入总是得到相同结果，
不依赖任何模块级可变状态。
"""

from typing import Optional

from .models import DiskClassification, Rating, RatingLevel

RATING_STYLE = {
    RatingLevel.EXCELLENT: ("#22c55e", "🟢"),
    RatingLevel.GOOD: ("#eab308", "🟡"),
    RatingLevel.AVERAGE: ("#f97316", "🟠"),
    RatingLevel.POOR: ("#ef4444", "🔴"),
}

DISK_TYPE_NVME = "NVMe SSD"
DISK_TYPE_SSD = "标准SSD"
DISK_TYPE_HDD = "HDD (机械硬盘)"
DISK_TYPE_POOR = "性能不佳"


def create_rating(level: RatingLevel, description: str, score: Optional[float] = None) -> Rating:
    """创建评级结果（颜色与图标由等级决定）"""
    color, emoji = RATING_STYLE[level]
    return Rating(level=level, description=description, color=color, emoji=emoji, score=score)


def worst_rating(*ratings: Rating) -> Rating:
    """返回等级最差的评级（等级相同时取第一个）"""
    return min(ratings, key=lambda r: r.level.rank)


# ---------------------------------------------------------------- CPU

def evaluate_cpu_single_core(score: float) -> Rating:
    """CPU 单核评级（基于 sysbench 得分，边界为开区间）"""
    if score > 2000:
        return create_rating(RatingLevel.EXCELLENT, f"极佳 ({score} > 2000)", score)
    if score > 1500:
        return create_rating(RatingLevel.EXCELLENT, f"优秀 (1500 < {score} < 2000)", score)
    if score > 1000:
        return create_rating(RatingLevel.GOOD, f"良好 (1000 < {score} < 1500)", score)
    if score > 500:
        return create_rating(RatingLevel.AVERAGE, f"一般 (500 < {score} < 1000)", score)
    return create_rating(RatingLevel.POOR, f"较差 ({score} < 500)", score)


def evaluate_cpu_multi_core(multi_score: float, single_score: float, thread_count: int) -> Rating:
    """CPU 多核评级

    期望得分为 单核得分 × 线程数 × 0.8，按期望值的 100%/80%/60%/40% 分档。
    """
    expected = single_score * thread_count * 0.8
    excellent = expected * 1.0
    good = expected * 0.8
    average = expected * 0.6
    poor = expected * 0.4

    if multi_score > excellent:
        return create_rating(RatingLevel.EXCELLENT, f"极佳 ({multi_score} > {excellent:.0f})", multi_score)
    if multi_score > good:
        return create_rating(
            RatingLevel.EXCELLENT, f"优秀 ({good:.0f} < {multi_score} < {excellent:.0f})", multi_score
        )
    if multi_score > average:
        return create_rating(
            RatingLevel.GOOD, f"良好 ({average:.0f} < {multi_score} < {good:.0f})", multi_score
        )
    if multi_score > poor:
        return create_rating(
            RatingLevel.AVERAGE, f"一般 ({poor:.0f} < {multi_score} < {average:.0f})", multi_score
        )
    return create_rating(RatingLevel.POOR, f"较差 ({multi_score} < {poor:.0f})", multi_score)


def evaluate_cpu_efficiency(efficiency: float) -> Rating:
    """多核效率 = 多核得分 / (单核得分 × 线程数)"""
    if efficiency > 1.0:
        return create_rating(RatingLevel.EXCELLENT, "优秀 (效率 > 1.0，超线性扩展)", efficiency)
    if efficiency > 0.8:
        return create_rating(RatingLevel.GOOD, "良好 (0.8 < 效率 < 1.0)", efficiency)
    if efficiency > 0.6:
        return create_rating(RatingLevel.AVERAGE, "一般 (0.6 < 效率 < 0.8)", efficiency)
    return create_rating(RatingLevel.POOR, "较差 (效率 < 0.6)", efficiency)


# ---------------------------------------------------------------- 内存

def evaluate_memory_read(speed: float) -> Rating:
    """内存单线程读取评级（MB/s，按 DDR5/DDR4/DDR3 带宽分档）"""
    if speed >= 38912:
        return create_rating(RatingLevel.EXCELLENT, "DDR5级别", speed)
    if speed >= 20480:
        return create_rating(RatingLevel.GOOD, "DDR4级别", speed)
    if speed >= 10240:
        return create_rating(RatingLevel.AVERAGE, "DDR3级别", speed)
    return create_rating(RatingLevel.POOR, "存在超售", speed)


def evaluate_memory_write(speed: float) -> Rating:
    """内存单线程写入评级，写入通常为读取的 60-80%，阈值相应下调"""
    if speed >= 30000:
        return create_rating(RatingLevel.EXCELLENT, "DDR5级别", speed)
    if speed >= 15000:
        return create_rating(RatingLevel.GOOD, "DDR4级别", speed)
    return create_rating(RatingLevel.POOR, f"较弱 ({speed:.0f} < 15000 MB/s)", speed)


def evaluate_memory_overall(read_speed: float, write_speed: float) -> Rating:
    """内存综合评级：取读取、写入两项评级中较差的等级"""
    read_gb = f"{read_speed / 1024:.2f}"
    write_gb = f"{write_speed / 1024:.2f}"
    level = worst_rating(evaluate_memory_read(read_speed), evaluate_memory_write(write_speed)).level

    if level is RatingLevel.EXCELLENT:
        return create_rating(
            RatingLevel.EXCELLENT,
            f"优秀 - 读取 {read_gb} GB/s，写入 {write_gb} GB/s，达到 DDR5 级别性能（单通道 38-57 GB/s）",
        )
    if level is RatingLevel.GOOD:
        return create_rating(
            RatingLevel.GOOD,
            f"良好 - 读取 {read_gb} GB/s，写入 {write_gb} GB/s，达到 DDR4 级别性能（双通道 34-50 GB/s）",
        )
    if level is RatingLevel.AVERAGE:
        return create_rating(
            RatingLevel.AVERAGE,
            f"一般 - 读取 {read_gb} GB/s，写入 {write_gb} GB/s，达到 DDR3 级别性能（双通道 20-34 GB/s）",
        )
    if read_speed < 10240 or write_speed < 10240:
        return create_rating(
            RatingLevel.POOR,
            f"较差 - 读取 {read_gb} GB/s，写入 {write_gb} GB/s，低于 10 GB/s 阈值，"
            f"极大概率存在超售（可能原因：虚拟内存、ZRAM、气球驱动、KSM内存融合）",
        )
    return create_rating(
        RatingLevel.POOR,
        f"较差 - 读取 {read_gb} GB/s，写入 {write_gb} GB/s，写入低于 15 GB/s，未达到 DDR4 级别",
    )


# ---------------------------------------------------------------- 磁盘

def evaluate_disk_4k_performance(read_4k: float, write_4k: float) -> DiskClassification:
    """按 4K 读写平均速度判定磁盘类型

    NVMe ≥200 MB/s，标准 SSD ≥50 MB/s，HDD ≥10 MB/s，否则性能不佳。
    """
    avg = (read_4k + write_4k) / 2
    detail = f"4K读取 {read_4k:.2f} MB/s，4K写入 {write_4k:.2f} MB/s，平均 {avg:.2f} MB/s"

    if avg >= 200:
        return DiskClassification(DISK_TYPE_NVME, create_rating(
            RatingLevel.EXCELLENT, f"优秀 - {detail} ≥ 200 MB/s，达到 NVMe SSD 性能水平", avg))
    if avg >= 50:
        return DiskClassification(DISK_TYPE_SSD, create_rating(
            RatingLevel.GOOD, f"良好 - {detail} 在 50-200 MB/s 范围，为标准 SSD 性能", avg))
    if avg >= 10:
        return DiskClassification(DISK_TYPE_HDD, create_rating(
            RatingLevel.AVERAGE, f"一般 - {detail} 在 10-50 MB/s 范围，为机械硬盘性能", avg))
    return DiskClassification(DISK_TYPE_POOR, create_rating(
        RatingLevel.POOR, f"较差 - {detail} < 10 MB/s，性能严重受限或存在超售", avg))


def evaluate_disk_overselling(speed_1m: float, disk_type: str) -> Rating:
    """1M 顺序读写的超售检测，阈值取决于 4K 阶段判定出的磁盘类型"""
    gb = f"{speed_1m / 1024:.2f}"

    if disk_type == DISK_TYPE_NVME:
        if speed_1m >= 4000:
            return create_rating(RatingLevel.EXCELLENT,
                                 f"优秀 - 1M性能 {gb} GB/s ≥ 4 GB/s，达到 NVMe SSD 正常水平（4-6 GB/s），未发现资源超售",
                                 speed_1m)
        if speed_1m >= 1000:
            return create_rating(RatingLevel.AVERAGE,
                                 f"一般 - 1M性能 {gb} GB/s 在 1-4 GB/s 范围，低于 NVMe SSD 应有水平，可能存在 IO 限制",
                                 speed_1m)
        return create_rating(RatingLevel.POOR,
                             f"较差 - 1M性能 {gb} GB/s < 1 GB/s，严重低于 NVMe SSD 应有水平（4-6 GB/s），存在严重的资源超开超售",
                             speed_1m)

    if disk_type == DISK_TYPE_SSD:
        if speed_1m >= 1000:
            return create_rating(RatingLevel.GOOD,
                                 f"良好 - 1M性能 {gb} GB/s ≥ 1 GB/s，达到标准 SSD 正常水平（1-2 GB/s），未发现明显超售",
                                 speed_1m)
        if speed_1m >= 500:
            return create_rating(RatingLevel.AVERAGE,
                                 f"一般 - 1M性能 {gb} GB/s 在 0.5-1 GB/s 范围，略低于标准 SSD 应有水平，可能存在资源限制",
                                 speed_1m)
        return create_rating(RatingLevel.POOR,
                             f"较差 - 1M性能 {gb} GB/s < 0.5 GB/s，低于标准 SSD 正常水平（1-2 GB/s），可能存在 IO 限制或超售",
                             speed_1m)

    if disk_type == DISK_TYPE_HDD:
        if speed_1m >= 500:
            return create_rating(RatingLevel.GOOD,
                                 f"良好 - 1M性能 {gb} GB/s ≥ 500 MB/s，达到机械硬盘正常水平（500-600 MB/s）",
                                 speed_1m)
        if speed_1m >= 200:
            return create_rating(RatingLevel.AVERAGE,
                                 f"一般 - 1M性能 {gb} GB/s 在 200-500 MB/s 范围，略低于机械硬盘应有水平",
                                 speed_1m)
        return create_rating(RatingLevel.POOR,
                             f"较差 - 1M性能 {gb} GB/s < 200 MB/s，低于机械硬盘正常水平，可能存在 IO 限制",
                             speed_1m)

    if speed_1m >= 200:
        return create_rating(RatingLevel.AVERAGE, f"一般 - 1M性能 {gb} GB/s ≥ 200 MB/s，性能受限但尚可使用", speed_1m)
    return create_rating(RatingLevel.POOR, f"较差 - 1M性能 {gb} GB/s < 200 MB/s，性能严重受限", speed_1m)


# ---------------------------------------------------------------- IP 质量

def evaluate_ip_reputation(score: float) -> Rating:
    """声誉分数（越高越好）"""
    if score > 80:
        return create_rating(RatingLevel.EXCELLENT, "优秀", score)
    if score > 50:
        return create_rating(RatingLevel.GOOD, "良好", score)
    if score > 20:
        return create_rating(RatingLevel.AVERAGE, "一般", score)
    return create_rating(RatingLevel.POOR, "较弱", score)


def evaluate_ip_trust(score: float) -> Rating:
    """信任分数（越高越好，0-1 区间）"""
    if score > 0.8:
        return create_rating(RatingLevel.EXCELLENT, "优秀", score)
    if score > 0.5:
        return create_rating(RatingLevel.GOOD, "良好", score)
    if score > 0.3:
        return create_rating(RatingLevel.AVERAGE, "一般", score)
    return create_rating(RatingLevel.POOR, "较弱", score)


def evaluate_ip_risk_score(score: float) -> Rating:
    """VPN/代理/威胁/欺诈/滥用分数（越低越好）"""
    if score < 20:
        return create_rating(RatingLevel.EXCELLENT, "优秀", score)
    if score < 50:
        return create_rating(RatingLevel.GOOD, "良好", score)
    if score < 80:
        return create_rating(RatingLevel.AVERAGE, "一般", score)
    return create_rating(RatingLevel.POOR, "较弱", score)


def evaluate_ip_threat_level(level: str) -> Rating:
    """威胁级别（如 "low"、"Medium"），不区分大小写的子串匹配"""
    lowered = level.strip().lower()
    if "low" in lowered:
        return create_rating(RatingLevel.EXCELLENT, "优秀")
    if "medium" in lowered:
        return create_rating(RatingLevel.AVERAGE, "一般")
    return create_rating(RatingLevel.POOR, "较高")


def evaluate_ip_abuse_description(description: str) -> Rating:
    """ASN/公司滥用描述（如 "Very Low"、"Medium"），子串匹配"""
    lowered = description.lower()
    if "low" in lowered:
        return create_rating(RatingLevel.EXCELLENT, "优秀")
    if "medium" in lowered:
        return create_rating(RatingLevel.AVERAGE, "一般")
    return create_rating(RatingLevel.POOR, "较高")


# ---------------------------------------------------------------- 路由

def evaluate_route_quality(final_latency: float, total_hops: int) -> RatingLevel:
    """按最终延迟与跳数评估回程路由质量"""
    if final_latency < 100 and total_hops < 10:
        return RatingLevel.EXCELLENT
    if final_latency < 200 and total_hops < 15:
        return RatingLevel.GOOD
    if final_latency < 300 and total_hops < 20:
        return RatingLevel.AVERAGE
    return RatingLevel.POOR
