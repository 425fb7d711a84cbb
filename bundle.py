from pathlib import Path
import logging
import os
import plistlib
import shutil
import subprocess
import sys

from errors import BuildFailed, IoError

BUILD_DIR = Path("build")
ASSETS_DIR = Path("assets")
GO_PACKAGE = "./cmd/test3d"
GO_BUILD_TAGS = "game"


def go_build(output_path: Path):
    cmd = ["go", "build", "-tags", GO_BUILD_TAGS, "-o", str(output_path), GO_PACKAGE]
    logging.debug("Executing: %s", " ".join(cmd))

    try:
        result = subprocess.run(cmd)
    except OSError as e:
        raise BuildFailed(f"failed to run go build: {e}") from e

    if result.returncode != 0:
        raise BuildFailed(f"go build failed with exit code: {result.returncode}")

    print(f"Built binary: {output_path}")


def copy_assets(dst: Path, src: Path = ASSETS_DIR):
    """Zkopíruje assets do výstupu, pokud existují."""
    if not src.exists():
        logging.debug("No %s directory, skipping asset copy", src)
        return

    print("Copying assets...")
    try:
        shutil.copytree(src, dst, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise IoError(f"error copying assets: {e}") from e


def info_plist(name: str) -> dict:
    return {
        "CFBundleExecutable": name,
        "CFBundleIdentifier": f"com.mirgo.{name}",
        "CFBundleName": name,
        "CFBundlePackageType": "APPL",
        "CFBundleVersion": "1.0",
        "NSHighResolutionCapable": True,
    }


def build_macos_app(name: str, build_dir: Path) -> Path:
    app_path = build_dir / f"{name}.app"
    contents_path = app_path / "Contents"
    macos_path = contents_path / "MacOS"
    resources_path = contents_path / "Resources"

    # Struktura .app bundlu
    try:
        os.makedirs(macos_path, exist_ok=True)
        os.makedirs(resources_path, exist_ok=True)
    except OSError as e:
        raise IoError(f"error creating bundle structure: {e}") from e

    go_build(macos_path / name)
    copy_assets(resources_path / "assets")

    try:
        with open(contents_path / "Info.plist", "wb") as f:
            plistlib.dump(info_plist(name), f)
    except OSError as e:
        raise IoError(f"error writing Info.plist: {e}") from e

    print("\nBuild complete!")
    print(f"Created: {app_path}")
    print("Double-click to run or drag to Applications!")

    return app_path


def build_binary(name: str, build_dir: Path) -> Path:
    output_path = build_dir / name

    go_build(output_path)
    copy_assets(build_dir / "assets")

    print("\nBuild complete!")
    print(f"Run with: cd {build_dir} && ./{name}")

    return output_path


def build(name: str = None, build_dir=BUILD_DIR) -> Path:
    """
    Sestaví hru bez editoru. Na macOS jako .app bundle, jinde jako binárku
    s adresářem assets vedle ní.

    :param name: název výstupu, výchozí "game".
    :param build_dir: výstupní adresář.
    :return: cesta k bundlu nebo binárce.
    """
    name = name or "game"
    build_dir = Path(build_dir)

    print("Building game (without editor)...")

    try:
        os.makedirs(build_dir, exist_ok=True)
    except OSError as e:
        raise IoError(f"error creating build directory: {e}") from e

    if sys.platform == "darwin":
        return build_macos_app(name, build_dir)

    return build_binary(name, build_dir)


if __name__ == "__main__":
    build(sys.argv[1] if len(sys.argv) > 1 else None)
