"""时间工具函数模块"""

import re
from datetime import datetime

# podman 使用 Go 的时间格式，例如 "2024-01-02 03:04:05.123456789 +0000 UTC"
_GO_TIME_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[ T](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?\s*(?P<offset>Z|[+-]\d{2}:?\d{2})?"
)


def parse_created_timestamp(value: str) -> datetime:
    """
    解析镜像的创建时间

    Args:
        value: `podman image inspect --format {{.Created}}` 的输出

    Returns:
        datetime: 带时区的时间，无时区信息时按UTC处理

    Raises:
        ValueError: 无法解析时抛出
    """
    text = value.strip()
    match = _GO_TIME_RE.match(text)
    if not match:
        raise ValueError(f"无法解析时间戳: {value!r}")

    # datetime 只支持微秒精度
    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    offset = match.group("offset") or "+0000"
    if offset == "Z":
        offset = "+0000"
    offset = offset.replace(":", "")

    return datetime.strptime(
        f"{match.group('date')} {match.group('time')}.{fraction} {offset}",
        "%Y-%m-%d %H:%M:%S.%f %z",
    )
