#!/usr/bin/env python3
"""Request the narrative and chart analyses of a completed transcript from an LLM."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from _common import VideoInsightError, ensure_dir, load_json, resolve_path, save_text, setup_logging

LOGGER = logging.getLogger("video_insight.narrative_analysis")

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4.1",
}

SYSTEM_PROMPT = """You analyse transcripts of recorded videos. You receive the full transcript \
text, an automatic summary, and sentence-level sentiment labels produced by a speech-to-text \
service. Answer only from that material. Follow the requested output layout exactly, because \
your answer is parsed by a program before anyone reads it."""

ANALYSIS_PROMPT = """Based on the transcription of the audio, provide a detailed analysis in the following structured format:

1. **Purpose and Context**
  a. Summarize the main objective or goal of the individuals involved.
  b. Describe the broader context of the discussion or content.

2. **Analysis and Feedback**
  a. Offer constructive feedback on key strengths related to the purpose or goal.
  b. Identify specific areas for improvement.

3. **Actionable Recommendations for improvement**
  a. Provide clear and specific recommendations for improvement.

4. **Improvement and Prevention Strategies**
  a. Recommend strategies to sustain improvements.
  b. Propose methods to prevent potential issues in similar contexts.

Ensure:
- Each section and subpoint is clearly labeled (e.g., "1. **Purpose and Context**, a., b.").
- Bullet points are separated by newlines for proper formatting.
- The response adheres strictly to markdown style for easy frontend rendering."""

CHART_PROMPT = """Identify the content type (e.g., educational, motivational, discussion, entertainment).
Analyze the sentiment of the provided transcription. Based on the inferred content type, provide:

**Line Chart Analysis**:
a. Overall sentiment progression pattern
b. Key emotional transitions
c. Notable temporal patterns

**Pie Chart Analysis**:
a. Distribution breakdown
b. Dominant sentiment patterns
c. Content type correlation

Ensure each point is clear and separated by newlines."""


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--transcript", required=True, help="Transcript JSON from transcribe_assemblyai.py")
    parser.add_argument("--output-dir", required=True, help="Directory for analysis.txt and chart.txt")
    parser.add_argument("--provider", choices=["anthropic", "openai", "auto"], default="auto")
    parser.add_argument("--model", default=None, help="Model name (default: provider-specific)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser.parse_args()


def detect_provider(requested: str) -> str:
    if requested != "auto":
        return requested

    if os.environ.get("ANTHROPIC_API_KEY"):
        return "anthropic"
    if os.environ.get("OPENAI_API_KEY"):
        return "openai"

    raise VideoInsightError("No API key found. Set ANTHROPIC_API_KEY or OPENAI_API_KEY.")


def format_sentiment_lines(results: Any) -> str:
    if not isinstance(results, list):
        return ""
    lines: list[str] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        text = str(item.get("text") or "").strip()
        if not text:
            continue
        seconds = int(float(item.get("start") or 0) / 1000)
        minutes, secs = divmod(max(0, seconds), 60)
        lines.append(f"[{minutes:02d}:{secs:02d}] {item.get('sentiment') or 'NEUTRAL'}: {text}")
    return "\n".join(lines)


def build_transcript_context(transcript: dict[str, Any]) -> str:
    """Render the transcript fields the prompts refer to as plain text."""
    text = str(transcript.get("text") or "").strip()
    if not text:
        raise VideoInsightError(f"Transcript {transcript.get('id')} has no text to analyse")

    parts = [f"TRANSCRIPT:\n{text}"]
    summary = str(transcript.get("summary") or "").strip()
    if summary:
        parts.append(f"SUMMARY:\n{summary}")
    sentiments = format_sentiment_lines(transcript.get("sentiment_analysis_results"))
    if sentiments:
        parts.append(f"SENTIMENT BY SENTENCE:\n{sentiments}")
    return "\n\n".join(parts)


def build_prompt(task_prompt: str, context: str) -> str:
    return f"{context}\n\n{task_prompt}"


def call_anthropic(system_prompt: str, user_prompt: str, model: str) -> str:
    from anthropic import Anthropic

    client = Anthropic()
    response = client.messages.create(
        model=model,
        max_tokens=4096,
        temperature=0.2,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
    )

    parts: list[str] = []
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            parts.append(text)
    return "\n".join(parts).strip()


def call_openai(system_prompt: str, user_prompt: str, model: str) -> str:
    from openai import OpenAI

    client = OpenAI()
    lower_model = model.lower()
    is_reasoning = any(tag in lower_model for tag in ("gpt-5", "o3", "o4"))
    token_kwarg = "max_completion_tokens" if is_reasoning else "max_tokens"
    token_limit = 8192 if is_reasoning else 4096
    extra_kwargs = {} if is_reasoning else {"temperature": 0.2}

    response = client.chat.completions.create(
        model=model,
        **{token_kwarg: token_limit},
        **extra_kwargs,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    )

    usage = getattr(response, "usage", None)
    if usage:
        LOGGER.info(
            "Token usage: prompt=%s completion=%s total=%s",
            getattr(usage, "prompt_tokens", "?"),
            getattr(usage, "completion_tokens", "?"),
            getattr(usage, "total_tokens", "?"),
        )

    return (response.choices[0].message.content or "").strip()


def request_narratives(
    transcript: dict[str, Any],
    provider: str = "auto",
    model: str | None = None,
) -> tuple[str, str]:
    """Return the raw (analysis, chart) responses for one transcript.

    The two prompts run one after the other against the same transcript
    context.
    """
    provider = detect_provider(provider)
    model = model or DEFAULT_MODELS[provider]
    LOGGER.info("Using provider=%s model=%s", provider, model)

    call_fn = call_anthropic if provider == "anthropic" else call_openai
    context = build_transcript_context(transcript)

    analysis_text = call_fn(SYSTEM_PROMPT, build_prompt(ANALYSIS_PROMPT, context), model)
    LOGGER.info("Received analysis response (%s chars)", len(analysis_text))

    chart_text = call_fn(SYSTEM_PROMPT, build_prompt(CHART_PROMPT, context), model)
    LOGGER.info("Received chart response (%s chars)", len(chart_text))

    return analysis_text, chart_text


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    try:
        transcript = load_json(resolve_path(args.transcript))
        if not isinstance(transcript, dict):
            raise VideoInsightError(f"Transcript file must contain an object: {args.transcript}")

        analysis_text, chart_text = request_narratives(transcript, args.provider, args.model)

        output_dir: Path = ensure_dir(resolve_path(args.output_dir))
        save_text(output_dir / "analysis.txt", analysis_text)
        save_text(output_dir / "chart.txt", chart_text)
        print(f"Narrative analyses written to {output_dir}")
        return 0
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("narrative_analysis failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
