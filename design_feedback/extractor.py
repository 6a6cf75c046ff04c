"""
Issue Extraction

Heuristic, line-oriented parser that turns a free-form design critique into
a page description, a short summary and an ordered list of severity- and
category-tagged issues for JSON output.

There is no grammar here: severity headers ("Critical Issues:") set a
running severity/category that applies to every following bullet line
until the next header. Extraction is a pure function and always succeeds.
"""

from typing import Iterable, Optional

from .models import IssueExtraction, Severity, StructuredIssue


PAGE_DESCRIPTION_PREFIX = "page description:"
NO_PAGE_DESCRIPTION = "No page description provided."
DEFAULT_SUMMARY = "Design analysis completed successfully."
DEFAULT_CATEGORY = "General"

NO_ISSUES_PHRASES = (
    "no critical layout issues found",
    "no issues found",
    "no layout issues",
    "no visual issues",
    "no problems detected",
)

# First match wins, in declaration order
CATEGORY_KEYWORDS = (
    ("navigation", "Navigation"),
    ("layout", "Layout"),
    ("responsive", "Responsiveness"),
    ("accessibility", "Accessibility"),
    ("performance", "Performance"),
    ("visual", "Visual Design"),
    ("content", "Content"),
)

SEVERITY_ORDER = (Severity.CRITICAL, Severity.MAJOR, Severity.MINOR)
SUMMARY_KEYWORDS = ("overall", "summary", "assessment")
SECTION_WORDS = ("critical", "major", "minor", "issues", "recommendations", "assessment")
BULLET_MARKERS = ("-", "•")
SUMMARY_WINDOW = 4


def extract_issues(text: Optional[str]) -> IssueExtraction:
    """
    Derive a structured view from a free-form critique.

    Args:
        text: Raw critique text, any formatting (or None)

    Returns:
        IssueExtraction with page description, summary and issues.
        Unstructured text yields a single catch-all MAJOR/General issue;
        text with a recognized "no issues" phrase yields no issues.

    Example:
        extraction = extract_issues("Critical Issues:\\n- Menu hidden")
        extraction.issues[0].severity  # Severity.CRITICAL
    """
    text = text or ""
    lines = [line for line in text.splitlines() if line.strip()]

    page_description = None
    body = []
    for line in lines:
        if _is_page_description(line):
            if page_description is None:
                page_description = line.strip()[len(PAGE_DESCRIPTION_PREFIX):].strip()
            continue
        body.append(line)

    issues = _collect_issues(body)
    if not issues and text.strip() and not has_no_issues_phrase(text):
        issues = [StructuredIssue(
            severity=Severity.MAJOR,
            category=DEFAULT_CATEGORY,
            description=text.strip(),
        )]

    return IssueExtraction(
        page_description=page_description or NO_PAGE_DESCRIPTION,
        summary=_summarize(body),
        issues=issues,
    )


def has_no_issues_phrase(text: str) -> bool:
    """True if the text states that nothing was wrong with the page"""
    lower = text.lower()
    return any(phrase in lower for phrase in NO_ISSUES_PHRASES)


def header_severity(line: str) -> Optional[Severity]:
    """Severity named by a header line, or None for ordinary lines"""
    lower = line.strip().lower()
    for severity in SEVERITY_ORDER:
        if severity.value in lower:
            return severity
    return None


def category_for(header: str) -> str:
    """
    Category named by a severity header.

    "Critical Issues - Navigation" gives "Navigation"; otherwise the
    keyword table is consulted, then "General".
    """
    parts = header.split("-")
    if len(parts) > 1:
        named = parts[1].strip().rstrip(":").strip()
        if named:
            return named

    lower = header.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in lower:
            return category

    return DEFAULT_CATEGORY


def is_section_header(line: str) -> bool:
    lower = line.lower()
    return any(word in lower for word in SECTION_WORDS)


def is_bullet(line: str) -> bool:
    return line.strip().startswith(BULLET_MARKERS)


def _is_page_description(line: str) -> bool:
    return line.strip().lower().startswith(PAGE_DESCRIPTION_PREFIX)


def _bullet_text(line: str) -> str:
    stripped = line.strip()
    if not stripped.startswith(BULLET_MARKERS):
        return ""
    return stripped[1:].strip()


def _collect_issues(lines: Iterable[str]) -> list[StructuredIssue]:
    issues = []
    severity, category = Severity.MAJOR, DEFAULT_CATEGORY

    for line in lines:
        named = header_severity(line)
        if named is not None:
            severity, category = named, category_for(line)

        description = _bullet_text(line)
        if description:
            issues.append(StructuredIssue(
                severity=severity,
                category=category,
                description=description,
            ))

    return issues


def _summarize(lines: list[str]) -> str:
    body_text = "\n".join(lines)

    if has_no_issues_phrase(body_text):
        for line in lines:
            if has_no_issues_phrase(line):
                return line.strip()
        return body_text.strip()

    # Lines following the first "overall"/"summary"/"assessment" line
    for index, line in enumerate(lines):
        lower = line.lower()
        if any(keyword in lower for keyword in SUMMARY_KEYWORDS):
            # Bullets are dropped after slicing, so they use up window slots
            window = lines[index + 1:index + 1 + SUMMARY_WINDOW]
            picked = [candidate.strip() for candidate in window if not is_bullet(candidate)]
            if picked:
                return " ".join(picked)
            break

    for line in lines:
        if not is_section_header(line) and not is_bullet(line):
            return line.strip()

    return DEFAULT_SUMMARY
