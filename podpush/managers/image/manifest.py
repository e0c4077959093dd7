"""多压缩格式 manifest list 规划"""

from typing import List, Optional

from loguru import logger

from ...constants import ZSTD_ANNOTATION, ZSTD_FORMAT_PREFIX
from .base import ManifestMember, ManifestPlan


def format_tag_suffix(compression_format: str) -> str:
    """将压缩格式转换为可用于标签的后缀，例如 "zstd:chunked" -> "zstd-chunked" """
    return compression_format.replace(":", "-")


def plan_manifest(
    compression_formats: List[str], source_image: str, destination_image: str
) -> Optional[ManifestPlan]:
    """
    为多个压缩格式生成 manifest list 执行计划

    每个格式对应一个 "<镜像>-<格式>" 标签的成员镜像，manifest list 使用原始源镜像名。

    Args:
        compression_formats: 压缩格式列表
        source_image: 第一个源镜像
        destination_image: 第一个目标镜像

    Returns:
        Optional[ManifestPlan]: 少于两个格式时返回None
    """
    if len(compression_formats) < 2:
        return None

    logger.info(f"检测到多个压缩格式: {', '.join(compression_formats)}")
    members: List[ManifestMember] = []
    for compression_format in compression_formats:
        suffix = format_tag_suffix(compression_format)
        members.append(
            {
                "format": compression_format,
                "tagged_image": f"{source_image}-{suffix}",
                "destination": f"{destination_image}-{suffix}",
                "annotation": ZSTD_ANNOTATION if compression_format.startswith(ZSTD_FORMAT_PREFIX) else None,
            }
        )

    return {"list_name": source_image, "members": members}
