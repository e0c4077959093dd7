"""镜像推送相关功能"""

from typing import List, Optional

from loguru import logger

from ..base_manager import BaseManager
from ..context import RunContext
from .base import ManifestPlan, PushOutputs, PushRecord, ReconcileResult
from .command import PodmanCommand
from .utils import get_full_docker_image_name, get_image_repository


def validate_credentials(username: Optional[str], password: Optional[str]) -> str:
    """
    组合仓库凭证

    Args:
        username: 仓库用户名
        password: 仓库密码

    Returns:
        str: 用户名和密码都提供时返回 "用户名:密码"，否则返回空字符串
    """
    if username and not password:
        logger.warning("提供了用户名，但缺少密码，将以匿名方式推送")
    elif password and not username:
        logger.warning("提供了密码，但缺少用户名，将以匿名方式推送")
    elif username and password:
        return f"{username}:{password}"
    return ""


def get_push_message(source_images: List[str], destination_images: List[str], username: Optional[str] = None) -> str:
    message = f"⏳ 正在将 \"{', '.join(source_images)}\" 分别推送到 \"{', '.join(destination_images)}\""
    if username:
        message += f"，用户名 \"{username}\""
    return message


class ImagePusher(BaseManager):
    """镜像推送器类，按顺序执行推送命令并收集摘要"""

    def __init__(
        self,
        context: RunContext,
        digest_file: str,
        tls_verify: str = "",
        creds: str = "",
        extra_args: Optional[List[str]] = None,
        compression_format: str = "",
    ) -> None:
        """
        初始化镜像推送器

        Args:
            context: 运行上下文
            digest_file: 推送后写入摘要的文件路径
            tls_verify: 显式的TLS校验设置，空字符串表示不传
            creds: "用户名:密码" 形式的凭证，空字符串表示不传
            extra_args: 追加在命令末尾的额外参数
            compression_format: 单一压缩格式，多格式时由manifest计划处理
        """
        super().__init__(context)
        self.digest_file = digest_file
        self.tls_verify = tls_verify
        self.creds = creds
        self.extra_args = extra_args or []
        self.compression_format = compression_format

    def push(self, reconcile: ReconcileResult, plan: Optional[ManifestPlan] = None) -> PushOutputs:
        """
        推送所有目标镜像

        Args:
            reconcile: 镜像来源判定结果
            plan: 多压缩格式的manifest计划，为None时直接推送镜像

        Returns:
            PushOutputs: 最后一个摘要、推送的仓库路径列表和推送记录

        Raises:
            ExternalCommandFailure: 任一命令失败时抛出，后续推送不会执行
        """
        destination_images = self.context.destination_images
        if plan:
            self._assemble_manifest(plan, reconcile["from_foreign"])
            # 成员镜像只推送到了第一个目标仓库，其它仓库需要连同成员一起推送
            member_repository = get_image_repository(plan["members"][0]["destination"])
            records: List[PushRecord] = []
            for destination in destination_images:
                push_all = get_image_repository(destination) != member_repository
                records.extend(
                    self._push_images(
                        [plan["list_name"]], [destination], from_foreign=False, is_manifest=True, push_all=push_all
                    )
                )
        else:
            records = self._push_images(
                self.context.source_images,
                destination_images,
                from_foreign=reconcile["from_foreign"],
                is_manifest=reconcile["is_manifest"],
                push_all=True,
            )

        digests = [record["digest"] for record in records if record["digest"]]
        registry_paths = [record["destination"] for record in records]
        return {
            "digest": digests[-1] if digests else "",
            "registry_path": registry_paths[0] if registry_paths else "",
            "registry_paths": registry_paths,
            "records": records,
        }

    def build_push_command(
        self,
        source: str,
        destination: str,
        from_foreign: bool = False,
        is_manifest: bool = False,
        push_all: bool = True,
    ) -> PodmanCommand:
        """
        构建单个镜像的推送命令

        参数顺序: 临时存储参数、manifest子命令、push及摘要文件、--all、压缩格式、TLS、凭证，
        额外参数始终放在最后，以便调用方覆盖生成的参数。
        """
        command = PodmanCommand()
        if from_foreign:
            command.extend(self.context.scratch_opts)
            source = get_full_docker_image_name(source)
        if is_manifest:
            command.arg("manifest")
        command.arg("push", "--quiet").flag("--digestfile", self.digest_file).arg(source, destination)
        if is_manifest:
            command.option("--all", "true" if push_all else "false")
        command.option("--compression-format", self.compression_format)
        self._add_registry_options(command)
        return command

    def _add_registry_options(self, command: PodmanCommand) -> PodmanCommand:
        command.option("--tls-verify", self.tls_verify)
        command.option("--creds", self.creds)
        return command.extend(self.extra_args)

    def _assemble_manifest(self, plan: ManifestPlan, from_foreign: bool) -> None:
        """
        推送每个压缩格式的镜像，创建 manifest list 并添加成员

        每个格式先给源镜像打上 "<镜像>-<格式>" 临时标签再推送，推送后删除该标签。
        manifest list 必须在添加任何成员之前创建，任一步骤失败都会中止整个计划。
        """
        list_name = plan["list_name"]
        source = self.context.source_images[0]
        opts: List[str] = []
        if from_foreign:
            source = get_full_docker_image_name(source)
            opts = self.context.scratch_opts

        logger.info("以 <镜像>-<格式> 标签推送各压缩格式的镜像")
        for member in plan["members"]:
            tagged_image = member["tagged_image"]
            logger.info(f"推送镜像 {tagged_image} 到 {member['destination']}，压缩格式 {member['format']}")
            self._podman([*opts, "tag", source, tagged_image])
            try:
                command = PodmanCommand().extend(opts).arg("push")
                command.option("--compression-format", member["format"])
                command.arg(tagged_image, member["destination"])
                self._podman(self._add_registry_options(command).build())
            finally:
                # 只删除临时标签，源镜像的其它名称保持不变
                self._podman([*opts, "untag", tagged_image, tagged_image], check=False)

        logger.info(f"创建 manifest list {list_name}")
        self._podman(PodmanCommand("manifest", "create", list_name).build())

        for member in plan["members"]:
            logger.info(f"将 {member['destination']} 添加到 manifest list {list_name}，格式 {member['format']}")
            command = PodmanCommand("manifest", "add").option("--annotation", member["annotation"])
            command.option("--tls-verify", self.tls_verify).option("--creds", self.creds)
            self._podman(command.arg(list_name, member["destination"]).build())

    def _push_images(
        self,
        source_images: List[str],
        destination_images: List[str],
        from_foreign: bool,
        is_manifest: bool,
        push_all: bool,
    ) -> List[PushRecord]:
        """按顺序推送所有镜像，任一推送失败时立即中止"""
        records: List[PushRecord] = []
        for source, destination in zip(source_images, destination_images):
            command = self.build_push_command(source, destination, from_foreign, is_manifest, push_all)
            self._podman(command.build())
            logger.success(f"✅ 已成功将 \"{source}\" 推送到 \"{destination}\"")

            records.append(
                {
                    "source": source,
                    "destination": destination,
                    "digest": self._read_digest(),
                    "success": True,
                }
            )
        return records

    def _read_digest(self) -> Optional[str]:
        """读取摘要文件，读取失败时打印警告并返回None"""
        try:
            with open(self.digest_file, "r", encoding="utf-8") as f:
                digest = f.read().strip()
        except OSError as e:
            logger.warning(f"读取摘要文件 \"{self.digest_file}\" 失败: {e}")
            return None
        logger.info(digest)
        return digest
