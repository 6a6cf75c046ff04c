"""
Output Formatting

Renders a completed analysis as a rich terminal report or as structured
JSON, and writes rendered output to disk.
"""

import json
import logging
from io import StringIO
from pathlib import Path
from typing import Optional

from rich.console import Console, Group
from rich.text import Text

from . import __version__
from .errors import OutputWriteError
from .extractor import BULLET_MARKERS, extract_issues
from .models import IssueExtraction, RawAnalysis


logger = logging.getLogger(__name__)

CLI_NAME = "design-feedback"

SECTION_HEADERS = (
    "critical issues",
    "major issues",
    "minor issues",
    "recommendations",
    "overall assessment",
)

RULE_WIDTH = 40
FOOTER_RULE_WIDTH = 50


def _section_style(header: str) -> tuple:
    """(marker, style) for a section header"""
    lowered = header.lower()
    if "critical" in lowered:
        return "🔴", "bold red"
    if "major" in lowered:
        return "🟡", "bold yellow"
    if "minor" in lowered:
        return "🔵", "bold blue"
    return "ℹ️", "bold bright_black"


def _is_section_header(line: str) -> bool:
    lowered = line.lower()
    return any(header in lowered for header in SECTION_HEADERS)


def split_sections(text: str) -> list:
    """
    Split a critique into (header, lines) sections at the known headers.

    Lines before the first header belong to an untitled section. A
    critique without any content becomes a single "Feedback" section.
    """
    sections = []
    header = ""
    current = []

    for line in (line.strip() for line in text.splitlines()):
        if not line:
            continue
        if _is_section_header(line):
            if current:
                sections.append((header, current))
                current = []
            header = line
        else:
            current.append(line)

    if current:
        sections.append((header, current))

    if not sections:
        sections.append(("Feedback", [line.strip() for line in text.splitlines() if line.strip()]))

    return sections


def _header(analysis: RawAnalysis) -> Group:
    timestamp = analysis.produced_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return Group(
        Text("✓ Design Analysis Complete", style="bold green"),
        Text(""),
        Text.assemble("URL: ", (analysis.url or "Unknown", "cyan")),
        Text.assemble("Viewport: ", (analysis.viewport, "blue")),
        Text(f"Timestamp: {timestamp}"),
    )


def _section(header: str, lines: list) -> Group:
    rows = []
    if header:
        marker, style = _section_style(header)
        rows.append(Text(f"{marker} {header}", style=style))
        rows.append(Text("─" * RULE_WIDTH, style="bright_black"))

    for line in lines:
        if line.startswith(BULLET_MARKERS):
            rows.append(Text(f"  {line}"))
        else:
            rows.append(Text(line))
    return Group(*rows)


def _footer(analysis: RawAnalysis) -> Group:
    rows = [Text("─" * FOOTER_RULE_WIDTH, style="bright_black")]
    if analysis.analysis_time_ms:
        rows.append(Text(f"Analysis completed in {analysis.analysis_time_ms}ms", style="bright_black"))
    if analysis.screenshot_path:
        rows.append(Text(f"Screenshot: {analysis.screenshot_path}", style="bright_black"))
    rows.append(Text(f"Model: {analysis.model}", style="bright_black"))
    return Group(*rows)


def render_text(analysis: RawAnalysis, console: Console) -> None:
    """
    Print the terminal report for an analysis.

    Layout: header (title, URL, viewport, timestamp), the critique split
    into sections with coloured severity markers, then a footer with
    timing, screenshot location and model.

    Args:
        analysis: Completed (enriched) analysis
        console: Rich console to print to
    """
    console.print(_header(analysis))

    for header, lines in split_sections(analysis.text):
        console.print()
        console.print(_section(header, lines))

    console.print()
    console.print(_footer(analysis))


def format_text(analysis: RawAnalysis) -> str:
    """Plain-text rendition of render_text (no colour codes)"""
    console = Console(
        file=StringIO(),
        record=True,
        color_system=None,
        width=120,
        soft_wrap=True
    )
    render_text(analysis, console)
    return console.export_text()


def build_json_payload(
    analysis: RawAnalysis,
    extraction: Optional[IssueExtraction] = None
) -> dict:
    """
    Structured output document for an analysis.

    The extraction is computed from the critique text when not supplied.
    """
    extraction = extraction or extract_issues(analysis.text)
    return {
        "url": analysis.url or "Unknown",
        "timestamp": analysis.produced_at.isoformat(),
        "viewport": analysis.viewport,
        "model": analysis.model,
        "analysis_time_ms": analysis.analysis_time_ms,
        "screenshot_path": analysis.screenshot_path,
        "page_description": extraction.page_description,
        "summary": extraction.summary,
        "issues": [issue.model_dump(mode="json") for issue in extraction.issues],
        "metadata": {
            "version": __version__,
            "cli": CLI_NAME,
        },
    }


def format_json(
    analysis: RawAnalysis,
    extraction: Optional[IssueExtraction] = None
) -> str:
    """JSON document for an analysis, indented by 2"""
    return json.dumps(build_json_payload(analysis, extraction), indent=2, ensure_ascii=False)


def write_output(content: str, path: Path) -> Path:
    """
    Write rendered output to a file, creating parent directories.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write output to %s: %s", path, e)
        raise OutputWriteError(
            f"Failed to write output to file: {e.strerror or e}",
            path=str(path)
        ) from e

    logger.debug("Output written to %s", path)
    return path
