"""CLI工具模块，包含CLI命令行接口的辅助函数"""

import sys
from functools import wraps
from typing import Any, Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv
from loguru import logger

from .constants import PushInputs
from .formatters.summary import build_output_values, format_push_summary
from .managers.config_manager import ConfigError, ConfigManager
from .managers.image.base import ImagePushError, PushOutputs
from .utils import write_github_outputs

F = TypeVar("F", bound=Callable[..., Any])


def load_env_file(env_file: Optional[str]) -> None:
    """
    加载 .env 文件中的环境变量，已存在的环境变量不会被覆盖

    Args:
        env_file: .env 文件路径，为None时在当前目录向上查找
    """
    if env_file:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)


def collect_inputs(config_file: Optional[str], overrides: Mapping[str, Optional[str]]) -> PushInputs:
    """
    合并配置文件与命令行/环境变量输入

    Args:
        config_file: YAML配置文件路径
        overrides: 命令行或环境变量中的输入

    Returns:
        PushInputs: 合并后的运行配置

    Raises:
        ConfigError: 配置文件无效时抛出
    """
    config_manager = ConfigManager(config_file)
    config_manager.load_config()
    return config_manager.merge_inputs(overrides)


def report_outputs(outputs: PushOutputs) -> None:
    """显示推送结果并写入步骤输出"""
    format_push_summary(outputs)
    values = build_output_values(outputs)
    if write_github_outputs(values):
        logger.debug("已写入 GITHUB_OUTPUT")


def exit_on_error(func: F) -> F:
    """
    将错误输出到日志并以退出码1结束的装饰器，已知错误原样输出

    Args:
        func: 被装饰的函数

    Returns:
        Callable: 装饰后的函数
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ImagePushError, ConfigError) as e:
            logger.error(str(e))
            sys.exit(1)
        except Exception as e:
            logger.error(f"错误：{str(e)}")
            sys.exit(1)

    return wrapper  # type: ignore[return-value]
