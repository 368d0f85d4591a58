"""分段解析器基类

所有分段解析器继承 BaseExtractor，实现 parse(text) 返回该分段的结构化结果。
错误处理策略统一在 extract() 中实现：

- 软失败分段：记录一条 ParseError 并返回零值默认结果，解析继续
- 致命分段：记录一条 ParseError 并抛出 SectionParseError，由汇总器终止整个解析
"""

from abc import ABC, abstractmethod
import logging
import re
from typing import Any, Generic, List, Optional, TypeVar

from .models import ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SectionParseError(RuntimeError):
    """分段解析失败（致命分段抛出）

    Attributes:
        section: 出错的分段标签
        line: 出错行在分段中的行号（从 1 开始，未知时为 None）
    """

    def __init__(self, section: str, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.section = section
        self.line = line


class EmptySectionResult(ValueError):
    """非空分段中没有识别出任何数据"""


class BaseExtractor(ABC, Generic[T]):
    """分段解析器抽象基类

    子类需要声明：
        section: 分段标签（与 SectionName 的值一致）
        label: 分段的中文名称，用于错误信息
        fatal: 失败时是否终止整个解析
    """

    section: str = ""
    label: str = ""
    fatal: bool = False

    @abstractmethod
    def parse(self, text: str) -> T:
        """解析分段文本

        Args:
            text: 分段文本（不含分隔标记）

        Returns:
            分段的结构化结果

        Raises:
            SectionParseError: 结构性错误（仅致命分段）
            EmptySectionResult: 分段非空但没有识别出任何数据
        """
        pass

    @abstractmethod
    def default(self) -> T:
        """返回分段的零值默认结果"""
        pass

    def extract(self, text: str, errors: List[ParseError]) -> T:
        """按分段的错误策略执行解析

        Args:
            text: 分段文本
            errors: 本次解析共享的错误列表（会被追加）

        Returns:
            分段结果；软失败时为默认结果

        Raises:
            SectionParseError: 致命分段解析失败
        """
        try:
            result = self.parse(text)
            logger.debug(f"分段 {self.section} 解析完成（{len(text)} 字符）")
            return result
        except Exception as e:
            errors.append(self.make_error(line=getattr(e, "line", None)))
            if self.fatal:
                logger.error(f"分段 {self.section} 解析失败（致命）: {e}")
                if isinstance(e, SectionParseError):
                    raise
                raise SectionParseError(self.section, str(e)) from e
            logger.warning(f"分段 {self.section} 解析失败，使用默认值: {e}")
            return self.default()

    def make_error(self, message: Optional[str] = None, line: Optional[int] = None) -> ParseError:
        return ParseError(
            section=self.section,
            message=message or f"{self.label}结果解析失败",
            suggestion=f"请检查{self.label}数据格式",
            line=line,
        )

    def split_lines(self, text: str) -> List[str]:
        """去掉回车并拆分为非空行（保留行内缩进，由调用方决定是否 strip）"""
        return [line for line in text.replace("\r", "").split("\n") if line.strip()]

    def ensure_found(self, text: str, found: Any) -> None:
        """非空分段却没有识别出数据时抛出 EmptySectionResult"""
        if text.strip() and not found:
            raise EmptySectionResult(f"{self.label}中没有可识别的数据")

    @staticmethod
    def search_lines(lines: List[str], pattern: "re.Pattern[str]") -> Optional["re.Match[str]"]:
        """返回第一个匹配 pattern 的行的匹配对象"""
        for line in lines:
            match = pattern.search(line)
            if match:
                return match
        return None

    @staticmethod
    def decode_bytes(content: bytes) -> str:
        """智能编码检测

        尝试顺序：UTF-8 → GB18030 → GBK → latin-1

        Args:
            content: 待解码的字节内容

        Returns:
            解码后的文本字符串

        Note:
            latin-1 作为最终回退，因为它可以解码任何字节序列
        """
        encodings = ["utf-8", "gb18030", "gbk", "latin-1"]

        for encoding in encodings:
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue

        return content.decode("latin-1")
