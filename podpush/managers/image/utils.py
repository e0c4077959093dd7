"""镜像名称工具函数"""

import re
from typing import List, Tuple

from loguru import logger

from ...constants import (
    DIGEST_FILE_FORBIDDEN_CHARS,
    DIGEST_FILE_SUFFIX,
    DOCKER_IO,
    DOCKER_IO_NAMESPACED,
    PRIVATE_REGISTRY_DOMAINS,
)


def is_full_image_name(image: str) -> bool:
    """冒号出现在首字符之后即视为完整镜像名"""
    return image.find(":") > 0


def get_full_image_name(image: str, tag: str) -> str:
    """
    组合镜像名和标签

    Args:
        image: 镜像名
        tag: 标签或完整镜像名

    Returns:
        str: tag本身已是完整镜像名时原样返回，否则返回 "镜像名:标签"
    """
    if is_full_image_name(tag):
        return tag
    return f"{image}:{tag}"


def get_full_docker_image_name(image: str) -> str:
    """
    补全从Docker守护进程拉取的镜像名称

    从Docker镜像存储拉取到Podman后，短名称会带上docker.io前缀，
    比较创建时间和推送时需要使用补全后的名称。

    Args:
        image: 镜像名

    Returns:
        str: 补全后的镜像名
    """
    segments = image.split("/")
    if len(segments) == 1:
        return f"{DOCKER_IO_NAMESPACED}/{image}"
    if len(segments) == 2:
        if any(domain in image for domain in PRIVATE_REGISTRY_DOMAINS):
            return image
        return f"{DOCKER_IO}/{image}"
    return image


def build_image_references(
    image: str, registry: str, tags_list: List[str]
) -> Tuple[List[str], List[str]]:
    """
    组合镜像名、仓库地址和标签，生成源镜像和目标镜像列表

    Args:
        image: 镜像名（已转为小写）
        registry: 远程仓库地址
        tags_list: 标签列表

    Returns:
        Tuple[List[str], List[str]]: (源镜像列表, 目标镜像列表)
    """
    normalized_registry = registry.lower()
    registry_without_trailing_slash = re.sub(r"/$", "", normalized_registry)
    registry_path = f"{registry_without_trailing_slash}/{image}"
    logger.info(f"组合镜像名 \"{image}\" 和仓库 \"{registry}\"，得到仓库路径 \"{registry_path}\"")

    if "/" in image and "/" in registry:
        logger.warning(
            f"\"{registry_path}\" 看起来不是常见的仓库路径，只有少数仓库支持包含两个以上斜杠的路径。"
            "请检查镜像名和仓库地址的写法"
        )

    source_images = [get_full_image_name(image, tag) for tag in tags_list]
    destination_images = [get_full_image_name(registry_path, tag) for tag in tags_list]
    return source_images, destination_images


def default_digest_file(source_image: str) -> str:
    """
    根据第一个源镜像生成默认摘要文件名

    Args:
        source_image: 源镜像名

    Returns:
        str: 将路径非法字符替换为 "-" 后加上 "_digest.txt"
    """
    return re.sub(DIGEST_FILE_FORBIDDEN_CHARS, "-", source_image) + DIGEST_FILE_SUFFIX


def get_image_repository(image: str) -> str:
    """
    去掉镜像引用中的标签和摘要，返回仓库路径

    仓库地址中的端口号（例如 "localhost:5000/app"）不会被当作标签。
    """
    repository = image.split("@", 1)[0]
    name_start = repository.rfind("/") + 1
    tag_start = repository.rfind(":")
    if tag_start > name_start:
        repository = repository[:tag_start]
    return repository
