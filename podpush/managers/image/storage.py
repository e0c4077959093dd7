"""镜像存储检查相关功能"""

import shutil
import tempfile
from datetime import datetime
from typing import List

from loguru import logger

from ...constants import DOCKER_DAEMON_TRANSPORT, SCRATCH_STORE_PREFIX
from ...time_utils import parse_created_timestamp
from ...utils import find_fuse_overlayfs_path, is_storage_driver_overlay
from ..base_manager import BaseManager
from .base import (
    ImageNotFound,
    InconsistentManifestSet,
    InvalidImageMetadata,
    ReconcileResult,
    StorageCheckResult,
)
from .utils import get_full_docker_image_name


class ScratchStore(BaseManager):
    """
    用于从Docker守护进程拉取镜像的临时Podman镜像存储

    作为上下文管理器使用，退出时无论成功失败都会尝试删除其中的镜像和目录。
    """

    def __enter__(self) -> "ScratchStore":
        logger.info("创建临时Podman镜像存储，用于从Docker守护进程拉取镜像")
        root = tempfile.mkdtemp(prefix=SCRATCH_STORE_PREFIX)
        self.context.scratch_root = root
        self.context.scratch_opts = ["--root", root]

        # __exit__ 不会在 __enter__ 抛出异常时执行，需要在这里清理
        try:
            self.context.scratch_opts.extend(self._storage_opts())
        except Exception:
            self.remove()
            raise
        return self

    def _storage_opts(self) -> List[str]:
        """存储驱动为overlay时，使用环境中的fuse-overlayfs作为mount_program"""
        if not is_storage_driver_overlay():
            logger.info("存储驱动不是 'overlay'，不覆盖存储配置")
            return []

        fuse_overlayfs_path = find_fuse_overlayfs_path()
        if not fuse_overlayfs_path:
            logger.warning("未找到 \"fuse-overlayfs\"，请在运行前安装它")
            return []

        logger.info("使用环境中的 \"fuse-overlayfs\" 覆盖存储的 mount_program")
        return ["--storage-opt", f"overlay.mount_program={fuse_overlayfs_path}"]

    def __exit__(self, exc_type, exc, tb) -> None:
        self.remove()

    def remove(self) -> None:
        """删除临时存储中的所有镜像和目录，失败时只打印警告"""
        root = self.context.scratch_root
        if not root:
            return
        try:
            logger.info("删除从Docker守护进程拉取镜像使用的临时Podman镜像存储")
            self._podman([*self.context.scratch_opts, "rmi", "-a", "-f"])
            shutil.rmtree(root)
        except Exception as e:
            logger.warning(f"删除临时Podman镜像存储 {root} 失败: {e}")
        finally:
            self.context.scratch_root = None
            self.context.scratch_opts = []


class StorageReconciler(BaseManager):
    """判断要推送的镜像应取自Podman镜像存储还是Docker镜像存储"""

    def reconcile(self) -> ReconcileResult:
        """
        检查源镜像所在的存储并确定推送来源

        Returns:
            ReconcileResult: 是否为manifest，以及是否从Docker镜像存储推送

        Raises:
            InconsistentManifestSet: 只有部分源镜像是manifest时抛出
            ImageNotFound: 两个存储都缺少标签时抛出
            InvalidImageMetadata: 无法解析镜像创建时间时抛出
        """
        if self.check_manifests():
            return {"is_manifest": True, "from_foreign": False}

        source_images = self.context.source_images

        podman_result = self.check_local()
        podman_found, podman_missing = podman_result["found_tags"], podman_result["missing_tags"]
        if podman_found:
            logger.info(f"在Podman镜像存储中找到标签 \"{', '.join(podman_found)}\"")
        if podman_found and podman_missing:
            logger.warning(f"在Podman镜像存储中未找到标签 \"{', '.join(podman_missing)}\"")

        docker_result = self.pull_from_foreign()
        docker_found, docker_missing = docker_result["found_tags"], docker_result["missing_tags"]
        if docker_found:
            logger.info(f"在Docker镜像存储中找到标签 \"{', '.join(docker_found)}\"")
        if docker_found and docker_missing:
            logger.warning(f"在Docker镜像存储中未找到标签 \"{', '.join(docker_missing)}\"")

        if podman_missing and docker_missing:
            raise ImageNotFound(
                "❌ Podman和Docker镜像存储中都找不到全部标签。"
                f"标签 \"{', '.join(podman_missing)}\" 不在Podman镜像存储中，"
                f"标签 \"{', '.join(docker_missing)}\" 不在Docker镜像存储中。"
            )

        all_in_podman = len(podman_found) == len(source_images)
        all_in_docker = len(docker_found) == len(source_images)

        if all_in_podman and all_in_docker:
            if self.is_foreign_image_newer():
                logger.warning(
                    f"Docker镜像存储中的 \"{source_images[0]}\" 比Podman镜像存储中的更新，"
                    "将推送Docker镜像存储中的镜像"
                )
                from_foreign = True
            else:
                logger.warning(
                    f"Podman镜像存储中的 \"{source_images[0]}\" 不比Docker镜像存储中的旧，"
                    "将推送Podman镜像存储中的镜像"
                )
                from_foreign = False
        elif all_in_docker:
            logger.info(
                f"标签 \"{source_images[0]}\" 只存在于Docker镜像存储中，"
                "镜像会先拉取到临时Podman存储再推送，推送后删除"
            )
            from_foreign = True
        else:
            logger.info(
                f"标签 \"{source_images[0]}\" 只存在于Podman镜像存储中，将从Podman镜像存储推送"
            )
            from_foreign = False

        return {"is_manifest": False, "from_foreign": from_foreign}

    def check_manifests(self) -> bool:
        """
        检查源镜像是否为manifest list

        Returns:
            bool: 全部源镜像都是manifest时返回True

        Raises:
            InconsistentManifestSet: 只有部分源镜像是manifest时抛出
        """
        logger.info("🔍 检查给定镜像是否为manifest")
        found: List[str] = []
        missing: List[str] = []
        for manifest in self.context.source_images:
            result = self._podman(["manifest", "exists", manifest], check=False, group=True)
            (found if result.exit_code == 0 else missing).append(manifest)

        if found:
            logger.info(f"镜像 \"{', '.join(found)}\" 是manifest")

        if found and missing:
            raise InconsistentManifestSet(
                f"Manifest \"{', '.join(missing)}\" 不在Podman镜像存储中。"
                "请确保提供的镜像要么全部是manifest，要么全部是容器镜像"
            )

        return len(found) == len(self.context.source_images)

    def check_local(self) -> StorageCheckResult:
        """检查源镜像是否存在于Podman镜像存储中"""
        logger.info(f"🔍 检查 \"{', '.join(self.context.source_images)}\" 是否存在于本地Podman镜像存储中")
        result: StorageCheckResult = {"found_tags": [], "missing_tags": []}
        for image in self.context.source_images:
            exists = self._podman(["image", "exists", image], check=False)
            key = "found_tags" if exists.exit_code == 0 else "missing_tags"
            result[key].append(image)
        return result

    def pull_from_foreign(self) -> StorageCheckResult:
        """
        尝试从Docker守护进程把源镜像拉取到临时存储中

        拉取成功即视为镜像存在于Docker镜像存储中。
        """
        logger.info(f"🔍 检查 \"{', '.join(self.context.source_images)}\" 是否存在于本地Docker镜像存储中")
        result: StorageCheckResult = {"found_tags": [], "missing_tags": []}
        for image in self.context.source_images:
            pulled = self._podman(
                [*self.context.scratch_opts, "pull", f"{DOCKER_DAEMON_TRANSPORT}{image}"],
                check=False,
                group=True,
            )
            key = "found_tags" if pulled.exit_code == 0 else "missing_tags"
            result[key].append(image)
        return result

    def is_foreign_image_newer(self) -> bool:
        """
        比较两个存储中第一个源镜像的创建时间

        同一次推送的所有标签创建时间相同，只需比较第一个。

        Returns:
            bool: Docker镜像存储中的镜像严格更新时返回True，时间相同时返回False
        """
        image = self.context.source_images[0]
        local_created = self._inspect_created([], image)
        foreign_created = self._inspect_created(
            self.context.scratch_opts, get_full_docker_image_name(image)
        )
        logger.debug(f"Podman镜像创建时间: {local_created}，Docker镜像创建时间: {foreign_created}")
        return foreign_created > local_created

    def _inspect_created(self, opts: List[str], image: str) -> datetime:
        result = self._podman([*opts, "image", "inspect", image, "--format", "{{.Created}}"])
        try:
            return parse_created_timestamp(result.stdout)
        except ValueError as e:
            raise InvalidImageMetadata(f"无法读取镜像 \"{image}\" 的创建时间: {e}") from e

