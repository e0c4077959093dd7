"""基础管理器类"""

from typing import List

from ..utils import CommandResult
from .context import RunContext


class BaseManager:
    """所有管理器类的基类，包含共享的运行上下文"""

    context: RunContext

    def __init__(self, context: RunContext) -> None:
        """
        初始化基础管理器

        Args:
            context: 运行上下文
        """
        self.context = context

    def _podman(self, args: List[str], check: bool = True, group: bool = False) -> CommandResult:
        """通过上下文中的执行器运行podman命令"""
        return self.context.podman(args, check=check, group=group)
