"""工具函数模块"""

import os
import re
import shlex
import shutil
import subprocess
import tomllib
from typing import Callable, List, Mapping, NamedTuple, Optional, Sequence

from loguru import logger

from .constants import ERROR_MESSAGES, storage_conf_paths
from .managers.image.base import ExternalCommandFailure


class CommandResult(NamedTuple):
    """外部命令执行结果"""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def stdout_lines(self) -> List[str]:
        return self.stdout.splitlines()

    @property
    def stderr_lines(self) -> List[str]:
        return self.stderr.splitlines()


# 执行器签名: (可执行文件, 参数, check, group) -> CommandResult
Executor = Callable[..., CommandResult]


def run_command(
    executable: str,
    args: Sequence[str],
    check: bool = True,
    group: bool = False,
) -> CommandResult:
    """
    运行外部命令并返回结果

    Args:
        executable: 可执行文件路径
        args: 命令参数
        check: 是否检查返回码，为True时非零返回码会抛出异常
        group: 是否将命令及其输出作为一组显示在INFO级别日志中

    Returns:
        CommandResult: (返回码, 标准输出, 标准错误)

    Raises:
        ExternalCommandFailure: check为True且命令返回非零时抛出，消息中包含标准错误
    """
    command = [executable, *args]
    command_line = shlex.join(command)
    log = logger.info if group else logger.debug
    log(f"执行命令: {command_line}")

    process = subprocess.Popen(
        command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, universal_newlines=True
    )
    stdout, stderr = process.communicate()
    return_code = process.returncode

    for line in stdout.splitlines():
        log(line)
    for line in stderr.splitlines():
        log(line)

    if check and return_code != 0:
        message = ERROR_MESSAGES["command_failed"].format(os.path.basename(executable), return_code)
        if stderr:
            message += f"\n{stderr}"
        raise ExternalCommandFailure(message, exit_code=return_code, stderr=stderr)

    return CommandResult(return_code, stdout, stderr)


def find_executable(name: str) -> Optional[str]:
    """在PATH中查找可执行文件"""
    return shutil.which(name)


def split_by_newline(value: str) -> List[str]:
    return re.split(r"\r?\n", value)


def split_lines_and_words(value: str) -> List[str]:
    """
    先按行、再按空白拆分多行输入，丢弃空项

    Args:
        value: 多行字符串

    Returns:
        List[str]: 拆分后的参数列表
    """
    return [word for line in split_by_newline(value) for word in line.split()]


def find_storage_driver(file_paths: Sequence[str]) -> str:
    """
    从containers的storage.conf中读取存储驱动，后面的文件覆盖前面的文件

    Args:
        file_paths: 配置文件路径列表

    Returns:
        str: 存储驱动名称，未配置时返回空字符串
    """
    storage_driver = ""
    for file_path in file_paths:
        logger.debug(f"检查存储配置文件是否存在: {file_path}")
        if not os.path.exists(file_path):
            continue
        logger.debug(f"存储配置文件存在: {file_path}")
        try:
            with open(file_path, "rb") as f:
                content = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning(f"无法解析存储配置文件 {file_path}，已忽略: {e}")
            continue
        driver = content.get("storage", {}).get("driver")
        if driver:
            storage_driver = driver
    return storage_driver


def is_storage_driver_overlay() -> bool:
    return find_storage_driver(storage_conf_paths()) == "overlay"


def find_fuse_overlayfs_path() -> Optional[str]:
    return find_executable("fuse-overlayfs")


def write_github_outputs(values: Mapping[str, str]) -> bool:
    """
    将输出写入GitHub Actions的步骤输出文件

    GitHub 通过环境变量 `GITHUB_OUTPUT` 提供文件路径，写入 `name=value` 行后，
    同一个job中的后续步骤即可读取这些值。

    Args:
        values: 输出名称到值的映射

    Returns:
        bool: 是否写入了输出文件（未设置GITHUB_OUTPUT时返回False）
    """
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        return False
    with open(output_file, "a", encoding="utf-8") as handle:
        for key, value in values.items():
            handle.write(f"{key}={value}\n")
    return True
