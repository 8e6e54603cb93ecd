import os

import pytest

from project_exporter.core.errors import ProjectRootError
from project_exporter.core.models import ProjectConfig
from project_exporter.github_uploader import EnumerationSettings, iter_manifest_files, iter_project_files


def _paths(entries):
    return sorted(entry.relative_path for entry in entries)


def _write(root, relative, content="x"):
    path = root.joinpath(*relative.split("/"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestIterProjectFiles:
    def test_excludes_dotfiles_from_three_file_tree(self, project_tree):
        assert _paths(iter_project_files(project_tree)) == ["a.txt", "sub/b.txt"]

    def test_entries_carry_bytes_and_blob_metadata(self, project_tree):
        entries = {e.relative_path: e for e in iter_project_files(project_tree)}
        entry = entries["sub/b.txt"]
        assert entry.content == b"beta\n"
        assert entry.mode == "100644"
        assert entry.kind == "blob"
        assert not entry.relative_path.startswith("/")

    def test_never_descends_into_excluded_directories(self, tmp_path):
        for relative in [
            "src/app.py",
            "node_modules/pkg/index.js",
            ".git/HEAD",
            ".next/cache/x",
            "dist/bundle.js",
            "build/out.o",
            "src/__pycache__/app.cpython-312.pyc",
            "src/node_modules/nested.js",
            ".env.local",
            ".github/workflows/ci.yml",
        ]:
            _write(tmp_path, relative)

        paths = _paths(iter_project_files(tmp_path))

        assert paths == ["src/app.py"]

    def test_allow_listed_dotfile_is_kept(self, tmp_path):
        _write(tmp_path, ".well-known/security.txt")
        _write(tmp_path, ".hidden/file.txt")

        assert _paths(iter_project_files(tmp_path)) == [".well-known/security.txt"]

    def test_custom_settings(self, tmp_path):
        _write(tmp_path, "docs/readme.md")
        _write(tmp_path, "vendor/lib.js")
        _write(tmp_path, ".editorconfig")
        settings = EnumerationSettings.from_config(
            ProjectConfig(exclude=["vendor"], allow_dotfiles=[".editorconfig"])
        )

        assert _paths(iter_project_files(tmp_path, settings)) == [".editorconfig", "docs/readme.md"]

    def test_binary_content_is_read_verbatim(self, tmp_path):
        (tmp_path / "logo.png").write_bytes(b"\x89PNG\x00\xff")

        [entry] = list(iter_project_files(tmp_path))

        assert entry.content == b"\x89PNG\x00\xff"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinks_are_skipped(self, tmp_path):
        target = _write(tmp_path, "real.txt")
        try:
            (tmp_path / "link.txt").symlink_to(target)
        except OSError:
            pytest.skip("cannot create symlinks here")

        assert _paths(iter_project_files(tmp_path)) == ["real.txt"]

    @pytest.mark.skipif(os.name == "nt" or getattr(os, "geteuid", lambda: 0)() == 0,
                        reason="permission bits are not enforced")
    def test_unreadable_file_is_skipped(self, tmp_path):
        _write(tmp_path, "ok.txt")
        locked = _write(tmp_path, "locked.txt")
        locked.chmod(0)
        try:
            assert _paths(iter_project_files(tmp_path)) == ["ok.txt"]
        finally:
            locked.chmod(0o644)

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ProjectRootError):
            list(iter_project_files(tmp_path / "missing"))

    def test_root_must_be_a_directory(self, tmp_path):
        file_root = _write(tmp_path, "file.txt")
        with pytest.raises(ProjectRootError):
            list(iter_project_files(file_root))


class TestIterManifestFiles:
    def test_only_listed_files_are_yielded(self, project_tree):
        _write(project_tree, "c.txt")

        entries = list(iter_manifest_files(project_tree, ["sub/b.txt", "c.txt"]))

        assert _paths(entries) == ["c.txt", "sub/b.txt"]

    def test_missing_escaping_and_excluded_paths_are_skipped(self, project_tree):
        entries = list(iter_manifest_files(
            project_tree,
            ["a.txt", "nope.txt", "../outside.txt", ".env", "sub", "/a.txt"],
        ))

        assert _paths(entries) == ["a.txt"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinked_parent_outside_root_is_skipped(self, tmp_path):
        root = tmp_path / "project"
        outside = tmp_path / "outside"
        _write(root, "a.txt")
        _write(outside, "secret.txt", "TOP SECRET")
        try:
            (root / "sub").symlink_to(outside, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")

        entries = list(iter_manifest_files(root, ["a.txt", "sub/secret.txt"]))

        assert _paths(entries) == ["a.txt"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinked_parent_inside_root_is_skipped(self, tmp_path):
        _write(tmp_path, "real/b.txt")
        try:
            (tmp_path / "alias").symlink_to(tmp_path / "real", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")

        entries = list(iter_manifest_files(tmp_path, ["alias/b.txt", "real/b.txt"]))

        assert _paths(entries) == ["real/b.txt"]
