#!/usr/bin/env python3
"""Reshape free-form LLM analysis text into titled sections for the chart frontend."""

from __future__ import annotations

import argparse
import logging
import re
from typing import Any, Iterable

from _common import VideoInsightError, load_text, resolve_path, save_json, setup_logging

LOGGER = logging.getLogger("video_insight.section_parser")

DEFAULT_BULLET_GLYPHS: tuple[str, ...] = ("•", "-", "*")

# ── Matchers ─────────────────────────────────────────────────────────────────
# Top-level item: "1. **Title**" or "1. Title". The split form is a lookahead
# so the delimiter stays attached to the chunk it opens. Digits and item letters
# are ASCII only.
TOP_LEVEL_ITEM_SPLIT_RE = re.compile(r"(?=[0-9]+\.\s+(?:\*\*)?[^*\n]+(?:\*\*)?)")
TOP_LEVEL_TITLE_RE = re.compile(r"[0-9]+\.\s*(?:\*\*)?([^*\n]+)(?:\*\*)?")
SUBSECTION_HEADER_RE = re.compile(r"^([A-Za-z])\.\s*(?:\*\*)?([^*\n]+?)(?:\*\*)?(?::|\Z)")
NUMBERED_POINT_RE = re.compile(r"^[0-9]+\.\s*")
BOLD_EDGE_RE = re.compile(r"\A\*\*|\*\*\Z")

CHART_ITEM_SPLIT_RE = re.compile(r"\n\s*[a-z]\.\s+")
LINE_CHART_RE = re.compile(
    r"\*\*Line Chart Analysis\*\*:(.*?)(?=\*\*Pie Chart Analysis|\Z)",
    re.IGNORECASE | re.DOTALL | re.ASCII,
)
PIE_CHART_RE = re.compile(r"\*\*Pie Chart Analysis\*\*:(.*)\Z", re.IGNORECASE | re.DOTALL | re.ASCII)


def clean_text(text: str) -> str:
    """Trim whitespace and a bold marker hugging either end."""
    return BOLD_EDGE_RE.sub("", text.strip())


def match_subsection_header(line: str) -> str | None:
    match = SUBSECTION_HEADER_RE.match(line)
    if not match:
        return None
    return clean_text(match.group(2))


def match_bullet_point(line: str, glyphs: Iterable[str] = DEFAULT_BULLET_GLYPHS) -> str | None:
    """Return the text after a leading bullet glyph, or None for non-bullet lines."""
    for glyph in glyphs:
        if glyph and line.startswith(glyph):
            return line[len(glyph) :].strip()
    return None


def match_numbered_point(line: str) -> str | None:
    if not NUMBERED_POINT_RE.match(line):
        return None
    return NUMBERED_POINT_RE.sub("", line, count=1).strip()


# ── Nested analysis sections ─────────────────────────────────────────────────


def split_section_chunks(text: str) -> list[str]:
    return [chunk for chunk in TOP_LEVEL_ITEM_SPLIT_RE.split(text) if chunk.strip()]


def dedupe_chunks(chunks: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for chunk in chunks:
        key = clean_text(chunk)
        if key in seen:
            continue
        seen.add(key)
        unique.append(chunk)
    return unique


def add_point(subsection: dict[str, Any] | None, point: str) -> None:
    if subsection is None or not point:
        return
    if point not in subsection["points"]:
        subsection["points"].append(point)


def parse_subsections(content: str, bullet_glyphs: Iterable[str] = DEFAULT_BULLET_GLYPHS) -> list[dict[str, Any]]:
    glyphs = tuple(bullet_glyphs)
    subsections: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None

    lines = [line.strip() for line in content.split("\n")]
    for line in lines:
        if not line:
            continue

        subtitle = match_subsection_header(line)
        if subtitle is not None:
            if current is not None:
                subsections.append(current)
            current = {"subtitle": subtitle, "points": []}
            continue

        bullet = match_bullet_point(line, glyphs)
        if bullet is not None:
            add_point(current, bullet)
            continue

        numbered = match_numbered_point(line)
        if numbered is not None:
            add_point(current, numbered)
            continue

        # continuation line
        add_point(current, line)

    if current is not None:
        subsections.append(current)

    unique: list[dict[str, Any]] = []
    seen_subtitles: set[str] = set()
    for subsection in subsections:
        if subsection["subtitle"] in seen_subtitles:
            continue
        seen_subtitles.add(subsection["subtitle"])
        unique.append(subsection)

    return [subsection for subsection in unique if subsection["subtitle"]]


def parse_section(chunk: str, bullet_glyphs: Iterable[str] = DEFAULT_BULLET_GLYPHS) -> dict[str, Any] | None:
    match = TOP_LEVEL_TITLE_RE.search(chunk)
    if not match:
        return None

    title = clean_text(match.group(1))
    if not title:
        return None

    return {
        "title": title,
        "subsections": parse_subsections(chunk[match.end() :], bullet_glyphs),
    }


def parse_analysis_sections(
    text: str | None,
    bullet_glyphs: Iterable[str] = DEFAULT_BULLET_GLYPHS,
) -> list[dict[str, Any]]:
    """Parse numbered/lettered analysis text into ``[{title, subsections}]``.

    Chunks are deduplicated on their whole cleaned text before parsing and
    subsections on their subtitle afterwards. The two passes use different
    keys, so two chunks sharing a title but differing in body both survive.
    Text that does not follow the numbering convention is dropped, never
    raised on.
    """
    if not text:
        return []

    glyphs = tuple(bullet_glyphs)
    sections: list[dict[str, Any]] = []
    for chunk in dedupe_chunks(split_section_chunks(text)):
        section = parse_section(chunk, glyphs)
        if section is None:
            LOGGER.debug("Dropping chunk without a numbered title: %r", chunk[:60])
            continue
        sections.append(section)
    return sections


# ── Flat chart sections ──────────────────────────────────────────────────────


def parse_chart_content(content: str | None) -> list[dict[str, Any]]:
    if not content:
        return []

    pieces = CHART_ITEM_SPLIT_RE.split(content)
    title = pieces[0].strip()
    bullet_points = [
        point
        for point in (piece.strip() for piece in pieces[1:])
        if point and point != "undefined"
    ]
    return [{"title": title, "bulletPoints": bullet_points}]


def parse_chart_sections(text: str | None) -> dict[str, list[dict[str, Any]]]:
    """Split chart narrative text into line and pie chart sections."""
    text = text or ""
    line_match = LINE_CHART_RE.search(text)
    pie_match = PIE_CHART_RE.search(text)
    return {
        "lineChartAnalysis": parse_chart_content(line_match.group(1)) if line_match else [],
        "pieChartAnalysis": parse_chart_content(pie_match.group(1)) if pie_match else [],
    }


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--analysis", default=None, help="Raw analysis response text file")
    parser.add_argument("--chart", default=None, help="Raw chart analysis response text file")
    parser.add_argument("--output", required=True, help="Path to write formatted sections JSON")
    parser.add_argument(
        "--bullet-glyph",
        action="append",
        dest="bullet_glyphs",
        default=None,
        help="Bullet glyph to recognise (repeatable, default: • - *)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    try:
        if not args.analysis and not args.chart:
            raise VideoInsightError("Nothing to format: pass --analysis and/or --chart")

        glyphs = tuple(args.bullet_glyphs) if args.bullet_glyphs else DEFAULT_BULLET_GLYPHS
        payload: dict[str, Any] = {}

        if args.analysis:
            sections = parse_analysis_sections(load_text(resolve_path(args.analysis)), glyphs)
            payload["aiAnalysisData"] = sections
            LOGGER.info("Parsed %s analysis section(s)", len(sections))

        if args.chart:
            payload.update(parse_chart_sections(load_text(resolve_path(args.chart))))
            LOGGER.info(
                "Parsed chart analysis (line=%s pie=%s)",
                len(payload["lineChartAnalysis"]),
                len(payload["pieChartAnalysis"]),
            )

        output_path = resolve_path(args.output)
        save_json(output_path, payload)
        print(f"Formatted sections written to {output_path}")
        return 0
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("section_parser failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
