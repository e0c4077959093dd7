"""常量配置模块"""

import os
from typing import List, TypedDict

# 标签相关
DEFAULT_TAG: str = "latest"

# Docker Hub 默认命名空间
DOCKER_IO: str = "docker.io"
DOCKER_IO_NAMESPACED: str = f"{DOCKER_IO}/library"

# 名称中包含这些域名的两段式镜像名视为私有仓库，不补全docker.io前缀
PRIVATE_REGISTRY_DOMAINS: List[str] = ["amazonaws.com"]

# 摘要文件名中不允许出现的字符
DIGEST_FILE_FORBIDDEN_CHARS: str = r'[/\\?%*:|"<>]'
DIGEST_FILE_SUFFIX: str = "_digest.txt"

# 压缩格式相关
ZSTD_FORMAT_PREFIX: str = "zstd"
ZSTD_ANNOTATION: str = "io.github.containers.compression.zstd=true"

# 临时镜像存储
SCRATCH_STORE_PREFIX: str = "podman-from-docker-"
DOCKER_DAEMON_TRANSPORT: str = "docker-daemon:"


def storage_conf_paths() -> List[str]:
    """
    返回containers存储配置文件的候选路径，后面的文件优先级更高

    Returns:
        List[str]: 配置文件路径列表
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return [
        "/etc/containers/storage.conf",
        os.path.join(xdg_config_home, "containers", "storage.conf"),
    ]


# 运行配置
class PushInputs(TypedDict):
    image: str
    tags: str
    registry: str
    username: str
    password: str
    tls_verify: str
    digestfile: str
    compression_formats: str
    extra_args: str


DEFAULT_PUSH_INPUTS: PushInputs = {
    "image": "",
    "tags": "",
    "registry": "",
    "username": "",
    "password": "",
    "tls_verify": "",
    "digestfile": "",
    "compression_formats": "",
    "extra_args": "",
}

# GitHub Actions 输入对应的环境变量
INPUT_ENV_VARS: PushInputs = {
    "image": "INPUT_IMAGE",
    "tags": "INPUT_TAGS",
    "registry": "INPUT_REGISTRY",
    "username": "INPUT_USERNAME",
    "password": "INPUT_PASSWORD",
    "tls_verify": "INPUT_TLS-VERIFY",
    "digestfile": "INPUT_DIGESTFILE",
    "compression_formats": "INPUT_COMPRESSION-FORMATS",
    "extra_args": "INPUT_EXTRA-ARGS",
}


# 输出名称
class OutputNames(TypedDict):
    digest: str
    registry_path: str
    registry_paths: str


OUTPUT_NAMES: OutputNames = {
    "digest": "digest",
    "registry_path": "registry-path",
    "registry_paths": "registry-paths",
}


# 错误消息
class ErrorMessages(TypedDict):
    mixed_tags: str
    image_required: str
    registry_required: str
    podman_not_found: str
    command_failed: str
    config_not_found: str
    config_validation: str


ERROR_MESSAGES: ErrorMessages = {
    "mixed_tags": "输入 \"tags\" 不能同时包含完整镜像名标签和普通标签",
    "image_required": "使用普通标签时必须提供输入 \"image\"",
    "registry_required": "使用普通标签时必须提供输入 \"registry\"",
    "podman_not_found": "未找到podman可执行文件，请确认已安装podman",
    "command_failed": "{} 退出码 {}",
    "config_not_found": "配置文件不存在: {}",
    "config_validation": "配置验证失败: {}",
}
