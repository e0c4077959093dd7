"""镜像标签解析相关功能"""

from typing import List, Tuple

from loguru import logger

from ...constants import ERROR_MESSAGES
from .base import ValidationError
from .utils import is_full_image_name


def get_tags_list(tags: str, default_tag: str) -> List[str]:
    """
    按空白拆分标签输入

    Args:
        tags: 原始标签字符串
        default_tag: 标签为空时使用的默认标签

    Returns:
        List[str]: 标签列表，保持输入顺序，允许重复
    """
    tags_list = tags.split()
    if not tags_list:
        logger.info(f"未提供输入 \"tags\"，使用默认标签 \"{default_tag}\"")
        tags_list.append(default_tag)
    return tags_list


def normalize_tags(tags_list: List[str]) -> Tuple[List[str], bool]:
    """
    将标签转换为小写

    Args:
        tags_list: 标签列表

    Returns:
        Tuple[List[str], bool]: (小写标签列表, 是否有标签被修改)
    """
    normalized_tags = [tag.lower() for tag in tags_list]
    is_normalized = any(normalized != tag for normalized, tag in zip(normalized_tags, tags_list))
    return normalized_tags, is_normalized


def validate_tags(tags_list: List[str]) -> bool:
    """
    校验标签列表不能混用完整镜像名和普通标签

    Args:
        tags_list: 标签列表

    Returns:
        bool: 标签是否为完整镜像名

    Raises:
        ValidationError: 混用两种形式时抛出
    """
    is_full_image_name_tag = is_full_image_name(tags_list[0])
    if any(is_full_image_name(tag) != is_full_image_name_tag for tag in tags_list):
        raise ValidationError(ERROR_MESSAGES["mixed_tags"])
    return is_full_image_name_tag
