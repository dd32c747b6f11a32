#!/usr/bin/env python3
"""Resolve a direct streamable audio URL for a video page via yt-dlp."""

from __future__ import annotations

import argparse
import logging

from _common import VideoInsightError, load_preset, run_command, setup_logging

LOGGER = logging.getLogger("video_insight.extract_audio")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--video-url", required=True, help="Video page URL")
    parser.add_argument("--preset", default=None, help="Preset name under config/presets/")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def build_command(video_url: str, audio_format: str = "bestaudio", audio_quality: int = 5) -> list[str]:
    return [
        "yt-dlp",
        "-f",
        audio_format,
        "--audio-quality",
        str(audio_quality),
        "--no-playlist",
        "-g",
        video_url,
    ]


def resolve_audio_url(video_url: str, audio_format: str = "bestaudio", audio_quality: int = 5) -> str:
    video_url = str(video_url or "").strip()
    if not video_url:
        raise VideoInsightError("Video URL is required")

    cmd = build_command(video_url, audio_format, audio_quality)
    LOGGER.debug("Running: %s", " ".join(cmd))
    completed = run_command(cmd)

    # yt-dlp prints one URL per requested format; the audio stream comes first
    lines = [line.strip() for line in (completed.stdout or "").splitlines() if line.strip()]
    if not lines:
        raise VideoInsightError(f"yt-dlp returned no audio URL for {video_url}")
    return lines[0]


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    try:
        preset = load_preset(args.preset)
        audio_url = resolve_audio_url(
            args.video_url,
            str(preset.get("audio_format") or "bestaudio"),
            int(preset.get("audio_quality", 5)),
        )
        LOGGER.info("Resolved audio URL for %s", args.video_url)
        print(audio_url)
        return 0
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("extract_audio failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
