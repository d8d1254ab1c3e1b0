from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for bulk submission (tqdm, TTY only).

In non-TTY environments (CI, redirected output) no bar is created so the
labeled log lines stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts finished submissions on a tqdm bar."""

    def __init__(self, total: int, *, description: str = "Submitting records") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.failed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="record",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, success: bool = True) -> None:
        """Record one finished submission."""
        self.completed += 1
        if not success:
            self.failed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(ok=self.completed - self.failed, failed=self.failed)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
