# src/pocket_copy/types.py
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Literal, TypedDict, Union

from typing_extensions import NotRequired

FromType = Literal["file", "dir", "glob"]
ToType = Literal["file", "dir", "template"]
DebugLevel = Literal["warning", "info", "debug"]

# (content, absolute source path) -> content to write
TransformFunc = Callable[[bytes, Path], bytes]


# Written with the functional syntax because "from" is a keyword.
PatternInput = TypedDict(
    "PatternInput",
    {
        "from": str,
        "to": NotRequired[str],
        "context": NotRequired[str],
        "toType": NotRequired[ToType],
        "ignore": NotRequired[list[str]],
        "flatten": NotRequired[bool],
        "transform": NotRequired[TransformFunc],
    },
)

# A bare string is shorthand for {"from": <string>}
PatternLike = Union[str, PatternInput]


class CopyOptionsInput(TypedDict, total=False):
    debug: DebugLevel | bool | str
    ignore: list[str]
    copy_unmodified: bool
    concurrency: int
    cache_path: str | Path | None


class CopyOptions(TypedDict):
    log_level: str
    ignore: list[str]
    copy_unmodified: bool
    concurrency: int
    cache_path: Path | None
