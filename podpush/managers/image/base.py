"""镜像推送基础类型定义"""

from typing import List, Optional, TypedDict


class ImagePushError(Exception):
    """镜像推送错误"""
    pass


class ValidationError(ImagePushError):
    """输入校验错误，在执行任何外部命令之前抛出"""
    pass


class InconsistentManifestSet(ImagePushError):
    """部分源镜像是manifest而另一部分不是"""
    pass


class ImageNotFound(ImagePushError):
    """Podman和Docker镜像存储中都找不到完整的标签集合"""
    pass


class InvalidImageMetadata(ImagePushError):
    """podman返回的镜像元数据无法解析"""
    pass


class ExternalCommandFailure(ImagePushError):
    """外部命令以非零退出码结束"""

    def __init__(self, message: str, exit_code: int = 1, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class StorageCheckResult(TypedDict):
    """单个镜像存储的检查结果"""
    found_tags: List[str]
    missing_tags: List[str]


class ReconcileResult(TypedDict):
    """镜像来源判定结果"""
    is_manifest: bool
    from_foreign: bool


class ManifestMember(TypedDict):
    """manifest list 中的单个压缩格式成员"""
    format: str
    tagged_image: str
    destination: str
    annotation: Optional[str]


class ManifestPlan(TypedDict):
    """多压缩格式的 manifest list 执行计划"""
    list_name: str
    members: List[ManifestMember]


class PushRecord(TypedDict):
    """单个镜像的推送记录"""
    source: str
    destination: str
    digest: Optional[str]
    success: bool


class PushOutputs(TypedDict):
    """一次运行的汇总输出"""
    digest: str
    registry_path: str
    registry_paths: List[str]
    records: List[PushRecord]
