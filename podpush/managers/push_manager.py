"""推送管理器类 - 门面模式实现"""

from typing import List, Optional, Tuple

from loguru import logger

from ..constants import DEFAULT_TAG, ERROR_MESSAGES, PushInputs
from ..utils import Executor, split_lines_and_words
from .base_manager import BaseManager
from .context import RunContext
from .image.base import ManifestPlan, PushOutputs, ReconcileResult, ValidationError
from .image.manifest import plan_manifest
from .image.push import ImagePusher, get_push_message, validate_credentials
from .image.storage import ScratchStore, StorageReconciler
from .image.tag import get_tags_list, normalize_tags, validate_tags
from .image.utils import build_image_references, default_digest_file


class PushManager(BaseManager):
    """
    推送管理器类，按 解析 -> 判定来源 -> 规划 -> 执行 的顺序完成一次推送

    每个阶段返回结果交给下一个阶段，运行期间的共享状态都保存在 RunContext 中。
    """

    def __init__(self, context: Optional[RunContext] = None, executor: Optional[Executor] = None) -> None:
        """
        初始化推送管理器

        Args:
            context: 运行上下文，默认新建
            executor: 外部命令执行器，只在新建上下文时使用
        """
        super().__init__(context or RunContext(executor=executor))

    def run(self, inputs: PushInputs) -> PushOutputs:
        """
        执行一次完整的推送

        Args:
            inputs: 运行配置

        Returns:
            PushOutputs: 推送结果

        Raises:
            ImagePushError: 校验、来源判定或推送失败时抛出
        """
        source_images, destination_images = self.resolve(inputs)
        self.context.source_images = source_images
        self.context.destination_images = destination_images

        compression_formats = split_lines_and_words(inputs["compression_formats"])
        if compression_formats:
            logger.info(f"压缩格式: {', '.join(compression_formats)}")
        extra_args = split_lines_and_words(inputs["extra_args"])

        with ScratchStore(self.context):
            reconcile = self.reconcile()
            plan = self.plan(compression_formats)

            logger.info(get_push_message(source_images, destination_images, inputs["username"]))
            creds = validate_credentials(inputs["username"], inputs["password"])
            digest_file = inputs["digestfile"] or default_digest_file(source_images[0])

            pusher = ImagePusher(
                self.context,
                digest_file,
                tls_verify=inputs["tls_verify"],
                creds=creds,
                extra_args=extra_args,
                compression_format=compression_formats[0] if len(compression_formats) == 1 else "",
            )
            return pusher.push(reconcile, plan)

    def resolve(self, inputs: PushInputs) -> Tuple[List[str], List[str]]:
        """
        解析标签并生成源镜像和目标镜像列表，不执行任何外部命令

        Raises:
            ValidationError: 标签混用，或普通标签模式下缺少镜像名/仓库地址时抛出
        """
        image = inputs["image"]
        registry = inputs["registry"]

        tags_list = get_tags_list(inputs["tags"], DEFAULT_TAG)
        normalized_tags, is_normalized = normalize_tags(tags_list)
        normalized_image = image.lower()

        if is_normalized or image != normalized_image:
            logger.warning("镜像名和标签必须为小写，已自动转换为小写")

        is_full_image_name_tag = validate_tags(normalized_tags)

        if not is_full_image_name_tag:
            if not normalized_image:
                raise ValidationError(ERROR_MESSAGES["image_required"])
            if not registry:
                raise ValidationError(ERROR_MESSAGES["registry_required"])
            return build_image_references(normalized_image, registry, normalized_tags)

        if normalized_image:
            logger.warning("使用完整镜像名标签时将忽略输入 \"image\"")
        if registry:
            logger.warning("使用完整镜像名标签时将忽略输入 \"registry\"")
        return list(normalized_tags), list(normalized_tags)

    def reconcile(self) -> ReconcileResult:
        return StorageReconciler(self.context).reconcile()

    def plan(self, compression_formats: List[str]) -> Optional[ManifestPlan]:
        return plan_manifest(
            compression_formats, self.context.source_images[0], self.context.destination_images[0]
        )
