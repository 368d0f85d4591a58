"""测试分段切分"""

from vps_parsers.models import SectionName
from vps_parsers.sections import SCRIPT_END_MARKER, SECTION_MARKERS, extract_section, extract_sections, marker_for


def test_extract_section_between_markers():
    text = "头部\n<A>\n  内容 1\n内容 2  \n<B>\n尾部"
    assert extract_section(text, "<A>", "<B>") == "内容 1\n内容 2"


def test_extract_section_missing_start_returns_empty():
    assert extract_section("没有任何标记", "<A>", "<B>") == ""


def test_extract_section_missing_end_reads_to_end():
    assert extract_section("<A>\n剩余全部内容\n", "<A>", "<B>") == "剩余全部内容"


def test_extract_section_ignores_end_marker_before_start():
    """结束标记只在起始标记之后查找"""
    text = "<B>\n前置\n<A>\n正文\n<B>\n"
    assert extract_section(text, "<A>", "<B>") == "正文"


def test_extract_section_is_idempotent():
    text = "<A>\n正文\n<B>"
    first = extract_section(text, "<A>", "<B>")
    second = extract_section(text, "<A>", "<B>")
    assert first == second == "正文"
    assert text == "<A>\n正文\n<B>"


def test_marker_table_is_ordered():
    assert [section for section, _ in SECTION_MARKERS] == list(SectionName)
    assert len(SCRIPT_END_MARKER) == 72
    assert "CPU测试" in marker_for(SectionName.CPU_TEST)


def test_extract_sections_full_report(sample_report, sample_sections):
    sections = extract_sections(sample_report)

    assert set(sections) == set(SectionName)
    for section, body in sample_sections.items():
        assert sections[section] == body.strip()


def test_extract_sections_last_section_stops_at_terminal_marker(sample_report):
    sections = extract_sections(sample_report)
    assert "总共花费" not in sections[SectionName.SPEED_TEST]


def test_extract_sections_missing_marker_gives_empty_section(build_report, sample_sections):
    raw = build_report(sample_sections, skip=(SectionName.STREAMING_TEST,))
    sections = extract_sections(raw)

    assert sections[SectionName.STREAMING_TEST] == ""
    # 前一个分段的结束标记缺失时截取到文本末尾
    assert "IPV4:" in sections[SectionName.DISK_FIO_TEST]
