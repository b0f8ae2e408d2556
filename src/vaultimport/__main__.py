"""vaultimport - Package entry point.

This module enables running the project with:

    python -m vaultimport ...

The 'vaultimport' console script points at run().
"""

from __future__ import annotations

import asyncio
import sys

from plugins.cli.plugin import CLIPlugin


async def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    return await CLIPlugin().run(argv)


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
