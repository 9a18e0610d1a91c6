"""Text and JSON rendering of dead code reports."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from jinja2 import Environment, FileSystemLoader

from .graph import DependencyGraph
from .models import DeadCodeReport

TEXT_TEMPLATE = "report.txt.j2"

_TEMPLATES_DIR = Path(__file__).with_name("templates")


def group_by_file(
    items: Iterable[Tuple[str, str]], root: str | os.PathLike[str]
) -> List[Tuple[str, List[str]]]:
    """Group ``(identity, name)`` pairs by relative file, keeping first-seen order."""
    grouped: Dict[str, List[str]] = {}
    for identity, name in items:
        grouped.setdefault(DependencyGraph.relative_path(identity, root), []).append(name)
    return list(grouped.items())


def relative_report_dict(
    report: DeadCodeReport, root: str | os.PathLike[str]
) -> Dict[str, object]:
    """Return :meth:`DeadCodeReport.to_dict` with paths relative to ``root``."""
    payload = report.to_dict()
    payload["deadFiles"] = [
        DependencyGraph.relative_path(identity, root) for identity in report.dead_files
    ]
    for key in ("deadExports", "deadCssClasses"):
        for item in payload[key]:
            item["file"] = DependencyGraph.relative_path(item["file"], root)
    return payload


def render_json(report: DeadCodeReport, root: str | os.PathLike[str]) -> str:
    return json.dumps(relative_report_dict(report, root), indent=2)


class ReportRenderer:
    """Renders reports through Jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories = [str(templates_dir)] if templates_dir else []
        directories.append(str(_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_text(self, report: DeadCodeReport, root: str | os.PathLike[str]) -> str:
        template = self._env.get_template(TEXT_TEMPLATE)
        return template.render(
            dead_files=[
                DependencyGraph.relative_path(identity, root) for identity in report.dead_files
            ],
            dead_exports=group_by_file(
                ((item.file, item.export_name) for item in report.dead_exports), root
            ),
            dead_css_classes=group_by_file(
                ((item.file, item.class_name) for item in report.dead_css_classes), root
            ),
        )


__all__ = ["ReportRenderer", "group_by_file", "relative_report_dict", "render_json"]
