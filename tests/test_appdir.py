import os
import subprocess
from unittest import mock

import pytest

from appimage_helpers.appdir import AppDir, AppDirError
from appimage_helpers.desktopfile import DesktopFileError

VALID = """[Desktop Entry]
Type=Application
Name=Demo
Exec=demo %F
Icon=demo
Categories=Utility;
"""


def make_appdir(tmp_path, desktop_text=VALID, icon_sizes=(128,), with_bin=True):
    root = tmp_path / "Demo.AppDir"
    apps = root / "usr" / "share" / "applications"
    apps.mkdir(parents=True)
    if with_bin:
        (root / "usr" / "bin").mkdir(parents=True)
    for size in icon_sizes:
        icon_dir = root / "usr" / "share" / "icons" / "hicolor" / f"{size}x{size}" / "apps"
        icon_dir.mkdir(parents=True)
        (icon_dir / "demo.png").write_bytes(f"icon-{size}".encode())
    desktop = apps / "demo.desktop"
    desktop.write_text(desktop_text, encoding="utf-8")
    return root, desktop


def test_from_desktop_file_sets_paths_and_copies(tmp_path):
    root, desktop = make_appdir(tmp_path)
    appdir = AppDir.from_desktop_file(desktop)
    assert appdir.path == str(root)
    assert appdir.desktop_file_path == f"{root}/demo.desktop"
    assert appdir.main_executable == f"{root}/usr/bin/demo"
    assert (root / "demo.desktop").read_text() == VALID
    assert (root / "demo.png").read_bytes() == b"icon-128"


def test_missing_desktop_file(tmp_path):
    with pytest.raises(AppDirError, match="Desktop file not found"):
        AppDir.from_desktop_file(tmp_path / "nothing.desktop")


def test_missing_usr_bin(tmp_path):
    _, desktop = make_appdir(tmp_path, with_bin=False)
    with pytest.raises(AppDirError, match="could not be identified"):
        AppDir.from_desktop_file(desktop)


def test_more_than_one_top_level_desktop_file(tmp_path):
    root, desktop = make_appdir(tmp_path)
    (root / "other.desktop").write_text(VALID)
    with pytest.raises(AppDirError, match="More than one desktop file"):
        AppDir.from_desktop_file(desktop)


def test_missing_exec_key(tmp_path):
    text = VALID.replace("Exec=demo %F\n", "")
    _, desktop = make_appdir(tmp_path, desktop_text=text)
    with pytest.raises(AppDirError, match="no Exec= key"):
        AppDir.from_desktop_file(desktop)


def test_exec_with_path_rejected(tmp_path):
    text = VALID.replace("Exec=demo %F", "Exec=/usr/bin/demo %F")
    _, desktop = make_appdir(tmp_path, desktop_text=text)
    with pytest.raises(AppDirError, match="Exec= contains a path"):
        AppDir.from_desktop_file(desktop)


def test_desktop_file_check_errors_propagate(tmp_path):
    text = VALID.replace("Categories=Utility;\n", "")
    _, desktop = make_appdir(tmp_path, desktop_text=text)
    with pytest.raises(DesktopFileError, match="Categories"):
        AppDir.from_desktop_file(desktop)


def test_copy_main_icon_prefers_128_over_others(tmp_path):
    root, _ = make_appdir(tmp_path, icon_sizes=(16, 128, 256))
    appdir = AppDir(path=str(root), desktop_file_path=f"{root}/demo.desktop")
    appdir.copy_main_icon_to_root("demo")
    assert (root / "demo.png").read_bytes() == b"icon-128"


def test_copy_main_icon_leaves_existing_untouched(tmp_path):
    root, _ = make_appdir(tmp_path, icon_sizes=(128,))
    (root / "demo.png").write_bytes(b"original")
    appdir = AppDir(path=str(root), desktop_file_path=f"{root}/demo.desktop")
    appdir.copy_main_icon_to_root("demo")
    assert (root / "demo.png").read_bytes() == b"original"


def test_copy_main_icon_without_candidates_copies_nothing(tmp_path):
    root, _ = make_appdir(tmp_path, icon_sizes=())
    appdir = AppDir(path=str(root), desktop_file_path=f"{root}/demo.desktop")
    appdir.copy_main_icon_to_root("demo")
    assert not (root / "demo.png").exists()


def test_create_icon_directories(tmp_path):
    appdir = AppDir(path=str(tmp_path), desktop_file_path=f"{tmp_path}/demo.desktop")
    appdir.create_icon_directories()
    appdir.create_icon_directories()
    hicolor = tmp_path / "usr" / "share" / "icons" / "hicolor"
    created = sorted(os.listdir(hicolor))
    assert "512x512" in created
    assert "8x8" in created
    assert len(created) == 9
    assert all((hicolor / name / "apps").is_dir() for name in created)


def test_get_elf_interpreter_strips_output(tmp_path):
    appdir = AppDir(path=str(tmp_path), desktop_file_path="", main_executable=f"{tmp_path}/usr/bin/demo")
    interpreter = "/lib64/ld-linux-x86-64.so.2"
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=interpreter + "\n")
    with mock.patch("appimage_helpers.appdir.subprocess.run", return_value=completed) as run:
        assert appdir.get_elf_interpreter() == interpreter
    assert run.call_args.args[0] == ["patchelf", "--print-interpreter", appdir.main_executable]


def test_get_elf_interpreter_failure_raises(tmp_path):
    appdir = AppDir(path=str(tmp_path), desktop_file_path="", main_executable=f"{tmp_path}/usr/bin/demo")
    completed = subprocess.CompletedProcess(args=[], returncode=1, stdout="not an ELF\n")
    with mock.patch("appimage_helpers.appdir.subprocess.run", return_value=completed):
        with pytest.raises(subprocess.CalledProcessError) as info:
            appdir.get_elf_interpreter()
    assert info.value.returncode == 1