"""镜像推送相关功能模块

该子包包含镜像推送的各个功能模块，如标签解析、名称处理、存储检查、manifest规划和推送。
"""

from .base import (
    ExternalCommandFailure,
    ImageNotFound,
    ImagePushError,
    InvalidImageMetadata,
    InconsistentManifestSet,
    ManifestMember,
    ManifestPlan,
    PushOutputs,
    PushRecord,
    ReconcileResult,
    StorageCheckResult,
    ValidationError,
)
from .command import PodmanCommand
from .manifest import plan_manifest
from .tag import get_tags_list, normalize_tags, validate_tags
from .utils import (
    build_image_references,
    default_digest_file,
    get_full_docker_image_name,
    get_full_image_name,
    get_image_repository,
    is_full_image_name,
)

__all__ = [
    "ImagePushError",
    "ValidationError",
    "InconsistentManifestSet",
    "ImageNotFound",
    "InvalidImageMetadata",
    "ExternalCommandFailure",
    "StorageCheckResult",
    "ReconcileResult",
    "ManifestMember",
    "ManifestPlan",
    "PushRecord",
    "PushOutputs",
    "PodmanCommand",
    "plan_manifest",
    "get_tags_list",
    "normalize_tags",
    "validate_tags",
    "is_full_image_name",
    "get_full_image_name",
    "get_full_docker_image_name",
    "get_image_repository",
    "build_image_references",
    "default_digest_file",
]
