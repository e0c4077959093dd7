"""推送结果格式化模块"""

import json
from typing import Dict

from loguru import logger

from ..constants import OUTPUT_NAMES
from ..managers.image.base import PushOutputs


def build_output_values(outputs: PushOutputs) -> Dict[str, str]:
    """将推送结果转换为步骤输出的键值对

    Args:
        outputs: 推送结果

    Returns:
        Dict[str, str]: 输出名称到字符串值的映射，registry-paths 为JSON数组
    """
    return {
        OUTPUT_NAMES["digest"]: outputs["digest"],
        OUTPUT_NAMES["registry_path"]: outputs["registry_path"],
        OUTPUT_NAMES["registry_paths"]: json.dumps(outputs["registry_paths"]),
    }


def format_push_summary(outputs: PushOutputs) -> None:
    """格式化并显示推送结果

    Args:
        outputs: 推送结果
    """
    logger.info("\n推送结果:")
    for record in outputs["records"]:
        logger.info(f"  {record['source']} -> {record['destination']}")
        if record["digest"]:
            logger.info(f"    摘要: {record['digest']}")
        else:
            logger.warning("    摘要: 未获取")

    if outputs["digest"]:
        logger.info(f"\n最后一个摘要: {outputs['digest']}")
