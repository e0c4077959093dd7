"""单次运行的上下文"""

from typing import List, Optional

from loguru import logger

from ..constants import ERROR_MESSAGES
from ..utils import CommandResult, Executor, find_executable, run_command
from .image.base import ExternalCommandFailure


class RunContext:
    """
    一次推送运行期间共享的状态

    源镜像/目标镜像列表、临时镜像存储路径和podman路径都保存在这里，
    并显式传递给各个组件。
    """

    executor: Executor
    source_images: List[str]
    destination_images: List[str]
    scratch_root: Optional[str]
    scratch_opts: List[str]

    def __init__(self, executor: Optional[Executor] = None, podman_path: Optional[str] = None) -> None:
        """
        初始化运行上下文

        Args:
            executor: 外部命令执行器，默认使用 run_command
            podman_path: podman可执行文件路径，默认在PATH中查找
        """
        self.executor = executor or run_command
        self._podman_path = podman_path
        self.source_images = []
        self.destination_images = []
        self.scratch_root = None
        self.scratch_opts = []

    def podman_path(self) -> str:
        """
        获取podman路径，首次调用时查找并打印版本信息

        Raises:
            ExternalCommandFailure: 找不到podman时抛出
        """
        if self._podman_path is None:
            path = find_executable("podman")
            if not path:
                raise ExternalCommandFailure(ERROR_MESSAGES["podman_not_found"])
            self._podman_path = path
            self.executor(path, ["version"], check=True, group=True)
            logger.debug(f"使用podman: {path}")
        return self._podman_path

    def podman(self, args: List[str], check: bool = True, group: bool = False) -> CommandResult:
        return self.executor(self.podman_path(), args, check=check, group=group)
