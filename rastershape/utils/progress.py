"""Progress helpers with a custom unicode bar."""

from __future__ import annotations

import random
from typing import Iterable, Optional, TypeVar

from tqdm import tqdm

T = TypeVar("T")

_BAR_CHARS = "⣀⣄⣆⣇⣧⣶⣷⣿"
_DEFAULT_BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
_ANSI_RESET = "\x1b[0m"
_ANSI_BG_BLACK = "\x1b[40m"
_BRIGHT_COLORS = [
    "\x1b[92m",  # bright green
    "\x1b[93m",  # bright yellow
    "\x1b[96m",  # bright cyan
    "\x1b[95m",  # bright magenta
    "\x1b[94m",  # bright blue
]


def _bar_format() -> str:
    color = random.choice(_BRIGHT_COLORS)
    return f"{_ANSI_BG_BLACK}{color}{_DEFAULT_BAR_FORMAT}{_ANSI_RESET}"


def iter_progress(
    iterable: Iterable[T],
    *,
    desc: Optional[str] = None,
    total: Optional[int] = None,
    enabled: bool = True,
) -> Iterable[T]:
    """Wrap ``iterable`` in a tqdm bar when enabled."""
    if not enabled:
        return iterable
    return tqdm(
        iterable,
        desc=desc,
        total=total,
        ascii=_BAR_CHARS,
        bar_format=_bar_format(),
        leave=True,
        dynamic_ncols=True,
    )


def progress_print(*args: object) -> None:
    """Print without disrupting an active tqdm bar."""
    tqdm.write(" ".join(str(arg) for arg in args))
