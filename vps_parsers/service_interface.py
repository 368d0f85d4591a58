"""解析服务接口（抽象层）

提供统一的测试报告解析接口，上层调用方（Web 按钮处理器、批处理脚本等）
依赖抽象接口而不是具体实现。
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class ReportServiceInterface(ABC):
    """测试报告解析服务接口

    返回值统一为 JSON 友好的字典：
        - result: 结构化结果（致命失败时为 None）
        - errors: 错误列表
        - metadata: 解析统计信息
    """

    @abstractmethod
    def parse_text(self, raw_input: str) -> Dict[str, Any]:
        """解析测试输出文本"""
        pass

    @abstractmethod
    def parse_file(self, file_path: str) -> Dict[str, Any]:
        """解析保存为文件的测试输出

        Args:
            file_path: 文件路径

        Returns:
            Dict[str, Any]: 解析结果

        Raises:
            FileNotFoundError: 文件不存在
        """
        pass
