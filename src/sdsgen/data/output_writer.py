# src/sdsgen/data/output_writer.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sdsgen.errors import FileIOError
from sdsgen.render import (
    render_development,
    render_markdown,
    render_openapi,
    render_readme,
    render_schema,
    render_tasks,
)
from .spec_types import Specification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    sds_dir: Path            # root/.sds
    specification_md: Path   # root/specification.md

    @staticmethod
    def for_root(root: Path) -> "OutputPaths":
        root = root.resolve()
        return OutputPaths(root=root, sds_dir=root / ".sds", specification_md=root / "specification.md")


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise FileIOError(f"Could not write {path.name}: {e}", path=str(path), operation="write") from e
    logger.debug("Wrote %s (%d bytes)", path, len(text.encode("utf-8")))


def write_outputs(spec: Specification, root: str | Path, *, platform: str = "") -> list[Path]:
    """Writes the .sds development files and specification.md under `root`.

    Returns the written paths in write order.

    Raises:
        FileIOError: Any OS failure while creating directories or writing files.
    """
    paths = OutputPaths.for_root(Path(root))
    try:
        paths.sds_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileIOError(f"Could not create {paths.sds_dir}: {e}", path=str(paths.sds_dir), operation="mkdir") from e

    files = [
        (paths.sds_dir / "development.json", render_development(spec)),
        (paths.sds_dir / "tasks.json", render_tasks(spec)),
        (paths.sds_dir / "README.md", render_readme(spec)),
        (paths.sds_dir / "openapi.yaml", render_openapi(spec)),
        (paths.sds_dir / "schema.sql", render_schema(spec)),
        (paths.specification_md, render_markdown(spec, platform)),
    ]
    written: list[Path] = []
    for path, text in files:
        _write(path, text)
        written.append(path)
    logger.info("Wrote %d output files under %s", len(written), paths.root)
    return written
