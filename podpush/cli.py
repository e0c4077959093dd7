"""CLI命令行接口模块"""

from typing import Optional

import typer
from loguru import logger

from podpush.cli_utils import collect_inputs, exit_on_error, load_env_file, report_outputs
from podpush.constants import INPUT_ENV_VARS
from podpush.managers.push_manager import PushManager

# 创建CLI应用
app = typer.Typer(
    help="将Podman或Docker镜像存储中的镜像推送到远程仓库",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich"
)


@app.callback()
def main_callback(
    env_file: Optional[str] = typer.Option(None, "--env-file", help=".env 文件路径，在解析其它参数前加载")
):
    """Podman镜像推送工具"""
    # 子命令的参数在此之后解析，因此 .env 中的 INPUT_* 变量可以生效
    load_env_file(env_file)


@app.command("push")
@exit_on_error
def push_image(
    image: str = typer.Option("", "-i", "--image", envvar=INPUT_ENV_VARS["image"], help="要推送的镜像名"),
    tags: str = typer.Option("", "-t", "--tags", envvar=INPUT_ENV_VARS["tags"], help="以空白分隔的标签，默认 latest"),
    registry: str = typer.Option("", "-r", "--registry", envvar=INPUT_ENV_VARS["registry"], help="远程仓库地址"),
    username: str = typer.Option("", "-u", "--username", envvar=INPUT_ENV_VARS["username"], help="仓库用户名"),
    password: str = typer.Option("", "-p", "--password", envvar=INPUT_ENV_VARS["password"], help="仓库密码"),
    tls_verify: str = typer.Option("", "--tls-verify", envvar=INPUT_ENV_VARS["tls_verify"], help="是否校验TLS证书 (true/false)"),
    digestfile: str = typer.Option("", "--digestfile", envvar=INPUT_ENV_VARS["digestfile"], help="摘要文件路径"),
    compression_formats: str = typer.Option(
        "", "--compression-formats", envvar=INPUT_ENV_VARS["compression_formats"], help="以换行分隔的压缩格式"
    ),
    extra_args: str = typer.Option(
        "", "--extra-args", envvar=INPUT_ENV_VARS["extra_args"], help="追加到 podman push 的额外参数，以换行分隔"
    ),
    config: Optional[str] = typer.Option(None, "-c", "--config", help="YAML配置文件路径"),
):
    """推送镜像到远程仓库"""
    inputs = collect_inputs(
        config,
        {
            "image": image,
            "tags": tags,
            "registry": registry,
            "username": username,
            "password": password,
            "tls_verify": tls_verify,
            "digestfile": digestfile,
            "compression_formats": compression_formats,
            "extra_args": extra_args,
        },
    )

    outputs = PushManager().run(inputs)
    report_outputs(outputs)
    logger.success("镜像推送成功")


def main():
    """主入口函数"""
    app()


if __name__ == "__main__":
    main()
