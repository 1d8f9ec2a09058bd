from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping

from mirror_tools.common import MirrorToolError


def command_map() -> dict[str, Callable[[], None]]:
    """
    Map CLI command names to Python entry functions.

    Each value is a `main()` function from one mirror helper module.
    """
    from mirror_tools.mirror_build import main as mirror_build
    from mirror_tools.mirror_push import main as mirror_push
    from mirror_tools.mirror_setup import main as mirror_setup

    return {
        "setup": mirror_setup,
        "build": mirror_build,
        "push": mirror_push,
    }


def build_parser(commands: Mapping[str, Callable[[], None]]) -> argparse.ArgumentParser:
    """Build argument parser with one positional command choice."""
    parser = argparse.ArgumentParser(
        prog="python3 -m mirror_tools.cli",
        description="Mirror upstream images into the private registry as multi-arch manifests.",
    )
    parser.add_argument("command", choices=sorted(commands.keys()))
    return parser


def run_command(command: str, commands: Mapping[str, Callable[[], None]]) -> None:
    """
    Run one registered command.

    `commands` is passed in to keep this function easy to test.
    """
    commands[command]()


def main(argv: list[str] | None = None) -> None:
    # Build command registry once so parser and dispatcher use the same keys.
    commands = command_map()
    parser = build_parser(commands)
    args = parser.parse_args(argv)

    try:
        run_command(args.command, commands)
    except MirrorToolError as exc:
        # Name the failing stage so workflow logs show where the run stopped.
        print(f"{exc.stage} failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
