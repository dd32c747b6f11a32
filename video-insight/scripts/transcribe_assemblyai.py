#!/usr/bin/env python3
"""Transcribe a remote audio stream with AssemblyAI summarization and sentiment analysis."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

import assemblyai as aai
import requests

from _common import VideoInsightError, load_preset, require_env, resolve_path, save_json, setup_logging
from extract_audio import resolve_audio_url

LOGGER = logging.getLogger("video_insight.transcribe_assemblyai")

DOWNLOAD_TIMEOUT = 60


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--video-url", help="Video page URL (audio resolved through yt-dlp)")
    source.add_argument("--audio-url", help="Direct streamable audio URL")
    parser.add_argument("--output", required=True, help="Path to write the transcript JSON")
    parser.add_argument("--preset", default=None, help="Preset name under config/presets/")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def configure_client(api_key: str) -> None:
    aai.settings.api_key = api_key


def build_transcription_config(preset: dict[str, Any]) -> aai.TranscriptionConfig:
    return aai.TranscriptionConfig(
        language_code=str(preset.get("language_code") or "en"),
        summarization=True,
        summary_model=aai.SummarizationModel(str(preset.get("summary_model") or "informative")),
        summary_type=aai.SummarizationType(str(preset.get("summary_type") or "bullets_verbose")),
        speaker_labels=bool(preset.get("speaker_labels", False)),
        sentiment_analysis=True,
    )


def upload_audio_stream(
    audio_url: str,
    transcriber: aai.Transcriber | None = None,
    session: requests.Session | None = None,
) -> str:
    """Stream the remote audio into AssemblyAI's upload endpoint without touching disk."""
    transcriber = transcriber or aai.Transcriber()
    http = session or requests.Session()

    with http.get(audio_url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
        response.raise_for_status()
        response.raw.decode_content = True
        upload_url = transcriber.upload_file(response.raw)

    if not upload_url:
        raise VideoInsightError("AssemblyAI upload returned no upload_url")
    return upload_url


def submit_transcription(
    upload_url: str,
    config: aai.TranscriptionConfig,
    transcriber: aai.Transcriber | None = None,
) -> str:
    transcriber = transcriber or aai.Transcriber()
    transcript = transcriber.submit(upload_url, config)
    if transcript.status == aai.TranscriptStatus.error:
        raise VideoInsightError(f"Transcription error: {transcript.error}")
    if not transcript.id:
        raise VideoInsightError("AssemblyAI did not return a transcript id")
    return transcript.id


def wait_for_transcript(
    transcript_id: str,
    poll_interval: float = 3.0,
    max_wait: float | None = 1800.0,
    transcript: aai.Transcript | None = None,
) -> dict[str, Any]:
    """Block until the transcript completes and return it as plain JSON.

    Raises VideoInsightError when the provider reports an error status or
    when ``max_wait`` seconds of polling elapse first.
    """
    aai.settings.polling_interval = poll_interval
    transcript = transcript or aai.Transcript(transcript_id=transcript_id)

    try:
        transcript.wait_for_completion(poll_timeout=max_wait)
    except aai.TranscriptError as exc:
        raise VideoInsightError(f"Transcription timed out: {exc}") from exc

    if transcript.status == aai.TranscriptStatus.error:
        raise VideoInsightError(f"Transcription error: {transcript.error}")

    LOGGER.info("Transcription completed (id=%s)", transcript_id)
    # enum members in the SDK payload become their string values
    return json.loads(json.dumps(transcript.json_response, default=str))


def transcribe_audio(audio_url: str, api_key: str, preset: dict[str, Any]) -> dict[str, Any]:
    configure_client(api_key)
    transcriber = aai.Transcriber()

    with requests.Session() as session:
        upload_url = upload_audio_stream(audio_url, transcriber=transcriber, session=session)
    LOGGER.info("Uploaded audio to AssemblyAI")

    transcript_id = submit_transcription(upload_url, build_transcription_config(preset), transcriber)
    LOGGER.info("Transcription started, ID: %s", transcript_id)

    return wait_for_transcript(
        transcript_id,
        poll_interval=float(preset.get("poll_interval", 3)),
        max_wait=float(preset["max_wait"]) if preset.get("max_wait") else None,
    )


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    try:
        api_key = require_env("ASSEMBLYAI_API_KEY")
        preset = load_preset(args.preset)

        audio_url = args.audio_url
        if args.video_url:
            audio_url = resolve_audio_url(
                args.video_url,
                str(preset.get("audio_format") or "bestaudio"),
                int(preset.get("audio_quality", 5)),
            )

        payload = transcribe_audio(audio_url, api_key, preset)
        output_path = resolve_path(args.output)
        save_json(output_path, payload)
        print(f"Transcript {payload.get('id')} written to {output_path}")
        return 0
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("transcribe_assemblyai failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
