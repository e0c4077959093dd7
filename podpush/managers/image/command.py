"""podman命令参数构建"""

from typing import List, Optional, Sequence, Tuple


class PodmanCommand:
    """
    按顺序收集podman命令参数

    每一项是 (标志, 值) 对，值为None时只输出标志本身；
    `option` 生成 "--name=value" 形式，`flag` 生成 "--name value" 两个参数。
    """

    def __init__(self, *args: str) -> None:
        self._parts: List[Tuple[str, Optional[str]]] = []
        self.arg(*args)

    def arg(self, *args: str) -> "PodmanCommand":
        for value in args:
            self._parts.append((value, None))
        return self

    def extend(self, args: Sequence[str]) -> "PodmanCommand":
        return self.arg(*args)

    def flag(self, name: str, value: Optional[str] = None) -> "PodmanCommand":
        self._parts.append((name, value))
        return self

    def option(self, name: str, value: Optional[str]) -> "PodmanCommand":
        """添加 "--name=value"，value为空时跳过"""
        if value:
            self._parts.append((f"{name}={value}", None))
        return self

    def build(self) -> List[str]:
        args: List[str] = []
        for name, value in self._parts:
            args.append(name)
            if value is not None:
                args.append(value)
        return args

    def __repr__(self) -> str:
        return f"PodmanCommand({' '.join(self.build())})"
