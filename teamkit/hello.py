"""A trivial greeting command."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence


def greeting(words: Iterable[str]) -> str:
    """Return "Hello " followed by each word and a space."""
    return "Hello " + "".join(f"{word} " for word in words)


def main(argv: Sequence[str] | None = None) -> int:
    """Print the greeting built from the command-line arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    print(greeting(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())