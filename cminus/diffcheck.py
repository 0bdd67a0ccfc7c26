"""Line-by-line comparison of two text files."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass
from itertools import zip_longest
from typing import TextIO

MAX_LINE_LENGTH = 1000


def _chunks(handle: TextIO) -> Iterator[str]:
    """Yield lines, splitting any longer than the line limit into pieces."""
    width = MAX_LINE_LENGTH - 1
    for line in handle:
        for start in range(0, len(line), width):
            yield line[start:start + width]


@dataclass(frozen=True)
class Difference:
    """The first place two files differ; a missing line means one file ended."""

    line_number: int
    first: str | None
    second: str | None

    @property
    def is_length_mismatch(self) -> bool:
        return self.first is None or self.second is None

    def describe(self) -> str:
        if self.is_length_mismatch:
            return "파일의 길이가 다릅니다.\n"
        return (
            f"파일 내용이 일치하지 않습니다 (라인 {self.line_number}).\n"
            f"파일 1: {self.first}파일 2: {self.second}"
        )


def _open(path: str) -> TextIO:
    return open(path, encoding="utf-8", errors="surrogateescape", newline="")


def compare_files(file1: str, file2: str) -> Difference | None:
    """Return the first difference between two files, or None if they match."""
    with _open(file1) as first, _open(file2) as second:
        pairs = zip_longest(_chunks(first), _chunks(second))
        for number, (a, b) in enumerate(pairs, start=1):
            if a != b:
                return Difference(number, a, b)
    return None


def main(argv: list[str] | None = None) -> int:
    """Compare the two files named on the command line and report any difference."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        print("usage: diffcheck <infile> <outfile>")
        return 1
    try:
        difference = compare_files(args[0], args[1])
    except OSError:
        print("파일을 열 수 없습니다.")
        return 1
    if difference is not None:
        sys.stdout.write(difference.describe())
    return 0