"""测试公共fixture"""

from typing import Callable, List, Optional, Sequence

import pytest
from loguru import logger

from podpush.managers.context import RunContext
from podpush.managers.image.base import ExternalCommandFailure
from podpush.utils import CommandResult

PODMAN = "/usr/bin/podman"


def _contains(args: Sequence[str], tokens: Sequence[str]) -> bool:
    """tokens 作为连续片段出现在 args 中"""
    n = len(tokens)
    return any(list(args[i : i + n]) == list(tokens) for i in range(len(args) - n + 1))


class FakeExecutor:
    """记录所有命令并按规则返回预设结果，未匹配的命令返回成功"""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self._rules: list = []

    def on(
        self,
        *tokens: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        side_effect: Optional[Callable[[List[str]], None]] = None,
    ) -> "FakeExecutor":
        self._rules.append((tokens, CommandResult(exit_code, stdout, stderr), side_effect))
        return self

    def __call__(self, executable: str, args: Sequence[str], check: bool = True, group: bool = False) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        result = CommandResult(0, "", "")
        for tokens, rule_result, side_effect in self._rules:
            if _contains(args, tokens):
                result = rule_result
                if side_effect:
                    side_effect(args)
                break
        if check and result.exit_code != 0:
            raise ExternalCommandFailure(
                f"podman 退出码 {result.exit_code}\n{result.stderr}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result

    def calls_with(self, *tokens: str) -> List[List[str]]:
        return [call for call in self.calls if _contains(call, tokens)]


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def context(executor: FakeExecutor) -> RunContext:
    return RunContext(executor=executor, podman_path=PODMAN)


@pytest.fixture
def log_warnings():
    """收集loguru输出的WARNING及以上级别消息"""
    messages: List[str] = []
    handler_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
