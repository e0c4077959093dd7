import json

import pytest
from typer.testing import CliRunner

from podpush import cli
from podpush.managers.image.base import ExternalCommandFailure, ValidationError

runner = CliRunner()

OUTPUTS = {
    "digest": "sha256:abc",
    "registry_path": "reg.io/app:v1",
    "registry_paths": ["reg.io/app:v1"],
    "records": [
        {"source": "app:v1", "destination": "reg.io/app:v1", "digest": "sha256:abc", "success": True},
    ],
}


class FakePushManager:
    """记录收到的输入，返回预设结果或抛出预设异常"""

    inputs = None
    error = None

    def run(self, inputs):
        FakePushManager.inputs = dict(inputs)
        if FakePushManager.error:
            raise FakePushManager.error
        return OUTPUTS


@pytest.fixture(autouse=True)
def fake_manager(monkeypatch, tmp_path):
    FakePushManager.inputs = None
    FakePushManager.error = None
    monkeypatch.setattr(cli, "PushManager", FakePushManager)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    return FakePushManager


def test_push_writes_step_outputs(tmp_path):
    output_file = tmp_path / "output"
    output_file.write_text("", encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["push", "-i", "app", "-t", "v1", "-r", "reg.io"],
        env={"GITHUB_OUTPUT": str(output_file)},
    )

    assert result.exit_code == 0
    lines = output_file.read_text(encoding="utf-8").splitlines()
    assert "digest=sha256:abc" in lines
    assert "registry-path=reg.io/app:v1" in lines
    assert f"registry-paths={json.dumps(['reg.io/app:v1'])}" in lines


def test_inputs_are_read_from_environment(fake_manager):
    result = runner.invoke(
        cli.app,
        ["push"],
        env={
            "INPUT_IMAGE": "app",
            "INPUT_TAGS": "v1 v2",
            "INPUT_REGISTRY": "reg.io",
            "INPUT_TLS-VERIFY": "false",
            "INPUT_EXTRA-ARGS": "--retry 2",
        },
    )

    assert result.exit_code == 0
    assert fake_manager.inputs["image"] == "app"
    assert fake_manager.inputs["tags"] == "v1 v2"
    assert fake_manager.inputs["tls_verify"] == "false"
    assert fake_manager.inputs["extra_args"] == "--retry 2"


def test_command_line_overrides_config_file(fake_manager, tmp_path):
    config = tmp_path / "podpush.yml"
    config.write_text("image: app\nregistry: reg.io\ntags: v1\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["push", "-c", str(config), "-t", "v2"])

    assert result.exit_code == 0
    assert fake_manager.inputs["image"] == "app"
    assert fake_manager.inputs["registry"] == "reg.io"
    assert fake_manager.inputs["tags"] == "v2"


def test_env_file_is_loaded_before_options(fake_manager, tmp_path):
    env_file = tmp_path / "push.env"
    env_file.write_text("INPUT_IMAGE=from-env-file\n", encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["--env-file", str(env_file), "push", "-r", "reg.io"],
        env={"INPUT_IMAGE": None},
    )

    assert result.exit_code == 0
    assert fake_manager.inputs["image"] == "from-env-file"


@pytest.mark.parametrize(
    "error",
    [
        ValidationError("❌ 标签混用"),
        ExternalCommandFailure("podman 退出码 125", exit_code=125, stderr="unauthorized"),
        OSError("磁盘空间不足"),
    ],
)
def test_push_errors_exit_with_code_one(fake_manager, error):
    fake_manager.error = error

    result = runner.invoke(cli.app, ["push", "-i", "app", "-r", "reg.io"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_invalid_config_file_exits_with_code_one(tmp_path):
    result = runner.invoke(cli.app, ["push", "-c", str(tmp_path / "missing.yml")])
    assert result.exit_code == 1


def test_unwritable_step_output_exits_with_code_one(tmp_path):
    result = runner.invoke(
        cli.app,
        ["push", "-i", "app", "-r", "reg.io"],
        env={"GITHUB_OUTPUT": str(tmp_path)},
    )

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
