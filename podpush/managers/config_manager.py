"""配置管理器类"""

import os
from typing import Any, Dict, Mapping, Optional, Type, cast

import yaml
from loguru import logger

from ..constants import DEFAULT_PUSH_INPUTS, ERROR_MESSAGES, PushInputs


class ConfigError(Exception):
    """配置错误"""

    pass


ValidationStructure = Dict[str, Type[Any]]


def generate_validation_structure(config_template: Mapping[str, Any]) -> ValidationStructure:
    """
    从配置模板生成验证结构，每个配置项对应其默认值的类型

    Args:
        config_template: 配置模板

    Returns:
        ValidationStructure: 验证结构
    """
    return {key: type(value) for key, value in config_template.items()}


class ConfigManager:
    """配置管理器类，合并配置文件、环境变量和命令行输入"""

    config_file: Optional[str]
    config: PushInputs
    ALLOWED_CONFIG_FIELDS: ValidationStructure

    def __init__(self, config_file: Optional[str] = None) -> None:
        """
        初始化配置管理器

        Args:
            config_file: YAML配置文件路径，默认为None
        """
        self.config_file = config_file
        self.config = cast(PushInputs, dict(DEFAULT_PUSH_INPUTS))
        self.ALLOWED_CONFIG_FIELDS = generate_validation_structure(DEFAULT_PUSH_INPUTS)

    def load_config(self) -> PushInputs:
        """
        加载YAML配置文件，未指定文件时返回默认配置

        配置文件中的多行值（例如 compression_formats）可以写成YAML列表。

        Returns:
            PushInputs: 加载后的配置

        Raises:
            ConfigError: 配置加载或验证失败时抛出
        """
        if not self.config_file:
            return self.config

        if not os.path.exists(self.config_file):
            raise ConfigError(ERROR_MESSAGES["config_not_found"].format(self.config_file))

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(e)) from e

        if not isinstance(data, dict):
            raise ConfigError(ERROR_MESSAGES["config_validation"].format("顶层必须是映射"))

        data = {key.replace("-", "_"): self._flatten(value) for key, value in data.items()}
        self.validate_config(data)
        self.config.update(cast(PushInputs, data))
        logger.debug(f"已加载配置文件: {self.config_file}")
        return self.config

    @staticmethod
    def _flatten(value: Any) -> Any:
        if isinstance(value, list):
            return "\n".join(str(item) for item in value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def validate_config(self, config: Dict[str, Any]) -> None:
        """
        验证配置项名称和类型

        Raises:
            ConfigError: 配置验证失败时抛出
        """
        for key, value in config.items():
            if key not in self.ALLOWED_CONFIG_FIELDS:
                raise ConfigError(ERROR_MESSAGES["config_validation"].format(f"未知的配置项: {key}"))
            value_type = self.ALLOWED_CONFIG_FIELDS[key]
            if not isinstance(value, value_type):
                raise ConfigError(
                    ERROR_MESSAGES["config_validation"].format(f"配置项类型错误: {key} 应为 {value_type.__name__}")
                )

    def merge_inputs(self, overrides: Mapping[str, Optional[str]]) -> PushInputs:
        """
        用命令行或环境变量中的非空值覆盖配置

        Args:
            overrides: 输入名称到值的映射

        Returns:
            PushInputs: 合并后的配置
        """
        for key, value in overrides.items():
            if key in self.config and value:
                self.config[key] = value  # type: ignore[literal-required]
        return self.config

