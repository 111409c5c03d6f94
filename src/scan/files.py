"""Source-unit discovery under a repository root."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path

# Directories that never hold analysable sources.
_SKIP_DIRS = frozenset({".git", ".hg", ".venv", "__pycache__", ".tox", ".nox"})


@dataclass(frozen=True)
class SourceFile:
    """A discovered source file and the identifiers derived from its path."""

    path: Path
    relative_path: str
    module_name: str


def module_name_for(rel_path: str) -> str:
    """Map a POSIX relative path to a dotted module name.

    A leading ``src/`` segment is dropped, the suffix is stripped and a
    trailing ``__init__`` names its package:

        >>> module_name_for("src/pkg/cli.py")
        'pkg.cli'
        >>> module_name_for("pkg/__init__.py")
        'pkg'
    """
    parts = [part for part in rel_path.replace("\\", "/").split("/") if part]
    if len(parts) >= 2 and parts[0] == "src":
        parts = parts[1:]
    if parts:
        parts[-1] = parts[-1].rsplit(".", 1)[0]
        if parts[-1] == "__init__":
            parts.pop()
    return ".".join(parts)


def _resolves_inside(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return False
    return True


def _gitignore_matcher(
    root: Path, *, nested_gitignore: bool
) -> Callable[[str], bool] | None:
    candidates = (
        [root / ".gitignore", *root.rglob(".gitignore")]
        if nested_gitignore
        else [root / ".gitignore"]
    )
    files = sorted(
        {path for path in candidates if path.is_file()},
        key=lambda p: p.relative_to(root).as_posix(),
    )
    if not files:
        return None

    matchers = [
        cast("Callable[[str], bool]", parse_gitignore(path))
        for path in files
    ]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Path outside this .gitignore's base directory.
                continue
        return False

    return matches


def _selected(
    rel_path: str,
    include_patterns: Sequence[str] | None,
    exclude_patterns: Sequence[str] | None,
) -> bool:
    if include_patterns and not any(fnmatch(rel_path, p) for p in include_patterns):
        return False
    return not (
        exclude_patterns and any(fnmatch(rel_path, p) for p in exclude_patterns)
    )


def find_source_files(
    root: Path,
    *,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    nested_gitignore: bool = False,
    suffix: str = ".py",
) -> Iterator[SourceFile]:
    """Yield analysable source files under ``root`` in relative-path order.

    Symlinks, files resolving outside ``root``, VCS/virtualenv directories and
    .gitignore'd paths are skipped. Include/exclude patterns are fnmatch globs
    applied to the POSIX relative path.
    """
    ignored = _gitignore_matcher(root, nested_gitignore=nested_gitignore)

    found: list[SourceFile] = []
    for path in root.rglob(f"*{suffix}"):
        rel = path.relative_to(root)
        if _SKIP_DIRS.intersection(rel.parts[:-1]):
            continue
        if path.is_symlink() or not path.is_file():
            continue
        if not _resolves_inside(path, root):
            continue
        if ignored is not None and ignored(str(path)):
            continue
        rel_path = rel.as_posix()
        if not _selected(rel_path, include_patterns, exclude_patterns):
            continue
        found.append(
            SourceFile(
                path=path,
                relative_path=rel_path,
                module_name=module_name_for(rel_path),
            )
        )

    found.sort(key=lambda f: f.relative_path)
    yield from found


__all__ = ["SourceFile", "find_source_files", "module_name_for"]
