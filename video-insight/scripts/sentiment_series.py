#!/usr/bin/env python3
"""Project transcript sentiment results into a cumulative score time series."""

from __future__ import annotations

import argparse
import logging
from typing import Any

from _common import VideoInsightError, load_json, resolve_path, save_json, setup_logging

LOGGER = logging.getLogger("video_insight.sentiment_series")

SENTIMENT_WEIGHTS = {"POSITIVE": 1, "NEGATIVE": -1}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--transcript", required=True, help="Transcript JSON from transcribe_assemblyai.py")
    parser.add_argument("--output", required=True, help="Path to write the sentiment series JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def project_sentiment_series(results: Any) -> list[dict[str, Any]]:
    """Walk sentiment results in order, keeping a running +1/-1 score.

    Timestamps are converted from milliseconds to seconds.
    """
    if not isinstance(results, list):
        return []

    series: list[dict[str, Any]] = []
    score = 0
    for item in results:
        if not isinstance(item, dict):
            continue
        score += SENTIMENT_WEIGHTS.get(str(item.get("sentiment") or "").upper(), 0)
        try:
            start_ms = float(item.get("start") or 0)
        except (TypeError, ValueError):
            start_ms = 0.0
        series.append({"timestamp": start_ms / 1000, "score": score})
    return series


def sentiment_distribution(series: list[dict[str, Any]]) -> dict[str, float]:
    total = len(series)
    if total == 0:
        return {"positive": 0.0, "negative": 0.0, "neutral": 0.0}

    positive = sum(1 for point in series if point["score"] > 0)
    negative = sum(1 for point in series if point["score"] < 0)
    neutral = total - positive - negative
    return {
        "positive": round(positive / total * 100, 2),
        "negative": round(negative / total * 100, 2),
        "neutral": round(neutral / total * 100, 2),
    }


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    try:
        transcript = load_json(resolve_path(args.transcript))
        if not isinstance(transcript, dict):
            raise VideoInsightError(f"Transcript file must contain an object: {args.transcript}")

        series = project_sentiment_series(transcript.get("sentiment_analysis_results"))
        distribution = sentiment_distribution(series)

        output_path = resolve_path(args.output)
        save_json(output_path, {"sentimentData": series, "distribution": distribution})
        LOGGER.info("Sentiment series written to %s (points=%s)", output_path, len(series))
        print(f"Projected {len(series)} sentiment points to {output_path}")
        return 0
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("sentiment_series failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
