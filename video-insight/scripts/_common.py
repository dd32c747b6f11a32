#!/usr/bin/env python3
"""Shared utilities for Video Insight scripts."""

from __future__ import annotations

import json
import logging
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from slugify import slugify

import os as _os

# VIDEO_INSIGHT_WORKDIR overrides the default work directory (tmp/ output).
ROOT_DIR = Path(_os.environ.get("VIDEO_INSIGHT_WORKDIR", "")).resolve() if _os.environ.get("VIDEO_INSIGHT_WORKDIR") else Path.cwd()

# Where the bundled files live (config/, scripts/)
SKILL_DIR = Path(__file__).resolve().parents[1]

DEFAULT_PRESET = "default"


class VideoInsightError(RuntimeError):
    """Raised when a pipeline stage cannot continue."""


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def resolve_path(path_str: str) -> Path:
    """Resolve a relative path. Bundled assets (config/) resolve to SKILL_DIR;
    everything else (tmp/, output) resolves to ROOT_DIR (workdir)."""
    path = Path(path_str)
    if path.is_absolute():
        return path
    if path_str.startswith("config/"):
        return SKILL_DIR / path
    return ROOT_DIR / path


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_json(path: Path, default: Any | None = None) -> Any:
    if not path.exists():
        if default is not None:
            return default
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def save_json(path: Path, payload: Any) -> None:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def load_text(path: Path) -> str:
    with path.open("r", encoding="utf-8") as handle:
        return handle.read()


def save_text(path: Path, text: str) -> None:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text)


def run_command(cmd: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, capture_output=True, text=True, check=check)


def require_env(name: str) -> str:
    value = _os.environ.get(name, "").strip()
    if not value:
        raise VideoInsightError(f"Missing required {name} in environment variables.")
    return value


def load_preset(preset_name: str | None) -> dict[str, Any]:
    requested = str(preset_name or DEFAULT_PRESET).strip().lower() or DEFAULT_PRESET
    presets_dir = resolve_path("config/presets")
    default_path = presets_dir / f"{DEFAULT_PRESET}.json"
    target_path = presets_dir / f"{requested}.json"

    selected_path = target_path
    if not target_path.exists():
        logging.getLogger("video_insight.common").warning(
            "Preset file not found for '%s', falling back to default", requested
        )
        selected_path = default_path

    payload = load_json(selected_path, default={})
    if not isinstance(payload, dict):
        payload = {}

    payload.setdefault("name", requested if selected_path == target_path else DEFAULT_PRESET)
    payload.setdefault("audio_format", "bestaudio")
    payload.setdefault("audio_quality", 5)
    payload.setdefault("language_code", "en")
    payload.setdefault("summary_model", "informative")
    payload.setdefault("summary_type", "bullets_verbose")
    payload.setdefault("speaker_labels", False)
    payload.setdefault("poll_interval", 3)
    payload.setdefault("max_wait", 1800)
    payload.setdefault("bullet_glyphs", ["•", "-", "*"])
    return payload


def utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_slug(value: str) -> str:
    return slugify(value) if value else ""
