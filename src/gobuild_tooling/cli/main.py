"""Main CLI entry point for gobuild tooling."""

import sys

from gobuild_tooling.cli import build as build_cli
from gobuild_tooling.cli import pack_cmd


def _usage() -> None:
    print("Usage: gobuild <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  build [--os OS] [--arch A] [-p PKG] [--pack]  - Cross-compile per os into build/bin",
        file=sys.stderr,
    )
    print(
        "  pack <source> <destination>                 - Pack a directory into tar/tar.gz",
        file=sys.stderr,
    )


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        _usage()
        sys.exit(1)

    command = sys.argv[1]

    if command == "build":
        sys.exit(build_cli.run_build_argv())
    elif command == "pack":
        sys.exit(pack_cmd.run_pack_argv())
    elif command in ("-h", "--help", "help"):
        _usage()
        sys.exit(0)
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        _usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
