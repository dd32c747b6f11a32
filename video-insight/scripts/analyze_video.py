#!/usr/bin/env python3
"""Analyse a video end to end and write the chart frontend's JSON response."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from _common import (
    VideoInsightError,
    load_preset,
    normalize_slug,
    require_env,
    resolve_path,
    save_json,
    setup_logging,
    utcnow,
)
from extract_audio import resolve_audio_url
from narrative_analysis import request_narratives
from section_parser import DEFAULT_BULLET_GLYPHS, parse_analysis_sections, parse_chart_sections
from sentiment_series import project_sentiment_series
from transcribe_assemblyai import transcribe_audio

LOGGER = logging.getLogger("video_insight.analyze_video")

OUTPUT_DIR = "tmp/analysis"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--video-url", default="", help="Video page URL to analyse")
    parser.add_argument("--output", default=None, help=f"Response JSON path (default: {OUTPUT_DIR}/<slug>.json)")
    parser.add_argument("--preset", default=None, help="Preset name under config/presets/")
    parser.add_argument("--provider", choices=["anthropic", "openai", "auto"], default="auto")
    parser.add_argument("--model", default=None, help="LLM model name (default: provider-specific)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def default_output_path(video_url: str) -> Path:
    slug = normalize_slug(video_url) or "video"
    return resolve_path(f"{OUTPUT_DIR}/{slug}.json")


def build_response(
    transcript: dict[str, Any],
    analysis_text: str,
    chart_text: str,
    bullet_glyphs: Iterable[str] = DEFAULT_BULLET_GLYPHS,
) -> dict[str, Any]:
    charts = parse_chart_sections(chart_text)
    return {
        "summaryData": transcript.get("summary"),
        "sentimentData": project_sentiment_series(transcript.get("sentiment_analysis_results")),
        "aiAnalysisData": parse_analysis_sections(analysis_text, bullet_glyphs),
        "lineChartAnalysis": charts["lineChartAnalysis"],
        "pieChartAnalysis": charts["pieChartAnalysis"],
    }


def build_error_response(exc: BaseException) -> dict[str, str]:
    return {"error": str(exc) or exc.__class__.__name__}


def run_analysis(
    video_url: str,
    preset: dict[str, Any],
    provider: str = "auto",
    model: str | None = None,
) -> dict[str, Any]:
    """Run every stage in order; any failure propagates to the caller."""
    video_url = str(video_url or "").strip()
    if not video_url:
        raise VideoInsightError("Video URL is required")

    api_key = require_env("ASSEMBLYAI_API_KEY")
    LOGGER.info("Starting transcription and analysis for: %s", video_url)

    audio_url = resolve_audio_url(
        video_url,
        str(preset.get("audio_format") or "bestaudio"),
        int(preset.get("audio_quality", 5)),
    )
    LOGGER.info("Got audio URL")

    transcript = transcribe_audio(audio_url, api_key, preset)

    analysis_text, chart_text = request_narratives(transcript, provider, model)

    glyphs = tuple(preset.get("bullet_glyphs") or DEFAULT_BULLET_GLYPHS)
    response = build_response(transcript, analysis_text, chart_text, glyphs)
    LOGGER.info(
        "Formatted response (sections=%s sentiment_points=%s line=%s pie=%s)",
        len(response["aiAnalysisData"]),
        len(response["sentimentData"]),
        len(response["lineChartAnalysis"]),
        len(response["pieChartAnalysis"]),
    )
    return response


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    output_path = resolve_path(args.output) if args.output else default_output_path(args.video_url)
    started = utcnow()

    try:
        preset = load_preset(args.preset)
        response = run_analysis(args.video_url, preset, args.provider, args.model)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error during analysis: %s", exc)
        save_json(output_path, build_error_response(exc))
        print(json.dumps({"status": "error", "output": str(output_path), "error": str(exc)}))
        return 1

    save_json(output_path, response)
    elapsed = (utcnow() - started).total_seconds()
    LOGGER.info("Response written to %s in %.1fs", output_path, elapsed)
    print(json.dumps({"status": "ok", "output": str(output_path), "elapsedSeconds": round(elapsed, 1)}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
