from pathlib import Path
import argparse
import logging
import sys

from attributes import flip_normals
from bundle import BUILD_DIR, build
from errors import UtilsError
from newscript import SCRIPTS_DIR, create_script


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mirgo-utils",
        description="Mirgo Engine utilities",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="cmd", metavar="command")

    p_newscript = subparsers.add_parser("newscript", help="Create a new Go script component")
    p_newscript.add_argument("name", help="Script type name, e.g. EnemyChaser")
    p_newscript.add_argument(
        "--scripts-dir",
        type=Path,
        default=SCRIPTS_DIR,
        help=f"Directory with script components (default: {SCRIPTS_DIR})",
    )

    p_flip = subparsers.add_parser("flipnormals", help="Flip normals in a GLTF model")
    p_flip.add_argument("path", help="Path to a .gltf file or a directory containing one")

    p_build = subparsers.add_parser("build", help="Build game as macOS .app bundle")
    p_build.add_argument("name", nargs="?", default=None, help="Output name (default: game)")
    p_build.add_argument(
        "--build-dir",
        type=Path,
        default=BUILD_DIR,
        help=f"Output directory (default: {BUILD_DIR})",
    )

    subparsers.add_parser("help", help="Show this help message")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    if args.cmd is None:
        parser.print_help(sys.stderr)
        return 1

    if args.cmd == "help":
        parser.print_help()
        return 0

    try:
        if args.cmd == "newscript":
            create_script(args.name, args.scripts_dir)
        elif args.cmd == "flipnormals":
            flip_normals(args.path)
        elif args.cmd == "build":
            build(args.name, args.build_dir)
    except UtilsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
