"""
Project file enumeration.
Walks a project root and yields the files that should end up in the exported repository.
"""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import FrozenSet, Iterable, Iterator

from loguru import logger

from ..core.errors import ProjectRootError
from ..core.models import DEFAULT_ALLOWED_DOTFILES, DEFAULT_EXCLUDED_NAMES, FileEntry, ProjectConfig


@dataclass(frozen=True)
class EnumerationSettings:
    """Names to skip while walking a project tree."""

    excluded_names: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_EXCLUDED_NAMES))
    allowed_dotfiles: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_ALLOWED_DOTFILES))

    @classmethod
    def from_config(cls, config: ProjectConfig) -> "EnumerationSettings":
        return cls(
            excluded_names=frozenset(config.exclude),
            allowed_dotfiles=frozenset(config.allow_dotfiles),
        )

    def is_excluded(self, name: str) -> bool:
        if name in self.excluded_names:
            return True
        return name.startswith(".") and name not in self.allowed_dotfiles


def _ensure_root(root: Path) -> Path:
    if not root.exists():
        raise ProjectRootError(f"Project root does not exist: {root}")
    if not root.is_dir():
        raise ProjectRootError(f"Project root is not a directory: {root}")
    return root


def _to_entry(file_path: Path, relative_path: str) -> FileEntry:
    return FileEntry(relative_path=relative_path, content=file_path.read_bytes())


def iter_project_files(root: Path | str,
                       settings: EnumerationSettings = EnumerationSettings()) -> Iterator[FileEntry]:
    """
    Yield every eligible regular file below ``root``.

    Args:
        root: Project directory to walk
        settings: Exclusion rules

    Yields:
        FileEntry with a POSIX path relative to ``root``

    Raises:
        ProjectRootError: If ``root`` is missing or not a directory
    """
    root = _ensure_root(Path(root))
    logger.info(f"Collecting files under {root}")
    yield from _walk(root, PurePosixPath(), settings)


def _walk(directory: Path, relative_dir: PurePosixPath,
          settings: EnumerationSettings) -> Iterator[FileEntry]:
    try:
        children = sorted(directory.iterdir(), key=lambda child: child.name)
    except OSError as e:
        logger.warning(f"Skipping unreadable directory {directory}: {e}")
        return

    for child in children:
        name = child.name
        relative = relative_dir / name

        if settings.is_excluded(name):
            logger.debug(f"Skipped excluded entry: {relative}")
            continue

        if child.is_symlink():
            logger.warning(f"Skipping symbolic link: {relative}")
            continue

        if child.is_dir():
            yield from _walk(child, relative, settings)
            continue

        if not child.is_file():
            logger.warning(f"Skipping special file: {relative}")
            continue

        try:
            entry = _to_entry(child, relative.as_posix())
        except OSError as e:
            logger.warning(f"Skipping unreadable file {relative}: {e}")
            continue

        logger.debug(f"Added file: {entry.relative_path}")
        yield entry


def iter_manifest_files(root: Path | str, paths: Iterable[str],
                        settings: EnumerationSettings = EnumerationSettings()) -> Iterator[FileEntry]:
    """
    Yield only the files named in an explicit manifest.

    Manifest paths are relative to ``root``. Paths that leave the root, hit an
    excluded name, or do not point at a readable regular file are skipped with
    a warning.
    """
    root = _ensure_root(Path(root)).resolve()
    seen = set()

    for raw_path in paths:
        relative = PurePosixPath(str(raw_path).replace("\\", "/").lstrip("/"))
        key = relative.as_posix()
        if key in seen or key in ("", "."):
            continue
        seen.add(key)

        if ".." in relative.parts:
            logger.warning(f"Skipping manifest path outside the project root: {raw_path}")
            continue

        if any(settings.is_excluded(part) for part in relative.parts):
            logger.warning(f"Skipping excluded manifest path: {key}")
            continue

        candidate = root.joinpath(*relative.parts)
        if any(root.joinpath(*relative.parts[:i]).is_symlink() for i in range(1, len(relative.parts) + 1)):
            logger.warning(f"Skipping manifest path through a symbolic link: {key}")
            continue
        if not candidate.resolve().is_relative_to(root):
            logger.warning(f"Skipping manifest path outside the project root: {raw_path}")
            continue
        if not candidate.is_file():
            logger.warning(f"Manifest entry is not a regular file, skipping: {key}")
            continue

        try:
            entry = _to_entry(candidate, key)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {key}: {e}")
            continue

        yield entry
