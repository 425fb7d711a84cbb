import plistlib
import subprocess
import sys

import pytest

import bundle
from bundle import build, info_plist
from errors import BuildFailed


@pytest.fixture
def go(monkeypatch):
    """Nahradí go toolchain, zaznamená volání a vytvoří výstupní binárku."""
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        output = cmd[cmd.index("-o") + 1]
        with open(output, "wb") as f:
            f.write(b"\x7fELF")
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(bundle.subprocess, "run", run)
    return calls


@pytest.fixture
def project(tmp_path, monkeypatch):
    (tmp_path / "assets" / "models").mkdir(parents=True)
    (tmp_path / "assets" / "models" / "duck.gltf").write_text("{}")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_build_binary(project, go, monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "linux")

    output = build()

    assert output == bundle.BUILD_DIR / "game"
    assert go == [["go", "build", "-tags", "game", "-o", str(output), "./cmd/test3d"]]
    assert (project / "build" / "game").exists()
    assert (project / "build" / "assets" / "models" / "duck.gltf").exists()

    out = capsys.readouterr().out
    assert "Building game (without editor)..." in out
    assert "Build complete!" in out


def test_build_macos_app(project, go, monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")

    app_path = build("shooter")

    contents = project / "build" / "shooter.app" / "Contents"
    assert app_path == bundle.BUILD_DIR / "shooter.app"
    assert (contents / "MacOS" / "shooter").exists()
    assert (contents / "Resources" / "assets" / "models" / "duck.gltf").exists()

    with open(contents / "Info.plist", "rb") as f:
        plist = plistlib.load(f)
    assert plist == info_plist("shooter")
    assert plist["CFBundleIdentifier"] == "com.mirgo.shooter"
    assert plist["NSHighResolutionCapable"] is True


def test_build_without_assets(tmp_path, go, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "platform", "linux")

    build("game", tmp_path / "out")

    assert (tmp_path / "out" / "game").exists()
    assert not (tmp_path / "out" / "assets").exists()


def test_build_merges_into_existing_assets(project, go, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    (project / "build" / "assets").mkdir(parents=True)
    (project / "build" / "assets" / "old.txt").write_text("old")

    build()

    assert (project / "build" / "assets" / "old.txt").exists()
    assert (project / "build" / "assets" / "models" / "duck.gltf").exists()


def test_go_build_failure(project, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(bundle.subprocess, "run", lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 2))

    with pytest.raises(BuildFailed, match="exit code: 2"):
        build()


def test_go_toolchain_missing(project, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")

    def run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "go")

    monkeypatch.setattr(bundle.subprocess, "run", run)

    with pytest.raises(BuildFailed, match="failed to run go build"):
        build()
