"""Repository-level annotation analysis."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from engine.run import AnalysisRun
from parse.treesitter_units import extract_source_unit
from rules.config import load_config
from scan.files import find_source_files

if TYPE_CHECKING:
    from pathlib import Path

    from engine.models import SourceUnit
    from rules.config import AnnotateConfig

logger = logging.getLogger(__name__)


def collect_source_units(root: Path, config: AnnotateConfig) -> list[SourceUnit]:
    """Parse every selected Python file under ``root``.

    Unreadable files are skipped with a warning.
    """
    units: list[SourceUnit] = []
    for source_file in find_source_files(
        root,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        unit = extract_source_unit(
            source_file.path, source_file.relative_path, source_file.module_name
        )
        if unit is not None:
            units.append(unit)
    return units


def analyze_repository(
    *,
    root: Path,
    config: AnnotateConfig | None = None,
) -> AnalysisRun:
    """Run visibility resolution (and suppression tracking) over a repository.

    Args:
        root: Root directory of the repository to analyze
        config: Optional configuration; loaded from annotate.toml when omitted

    Returns:
        The analysed run. Its diagnostics, symbols and suppression report are
        ready to read.
    """
    if config is None:
        config = load_config(root)

    units = collect_source_units(root, config)
    logger.info("Collected %d source units under %s", len(units), root)

    run = AnalysisRun.from_config(config)
    run.add_units(units)
    run.analyze()
    return run


__all__ = ["analyze_repository", "collect_source_units"]
