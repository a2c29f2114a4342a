"""
Chunk planning for clips that exceed the transcription upload limit.

Chunks are plain byte ranges; no decoding happens at the boundaries. Time
offsets are estimated from an assumed average bitrate, so they drift on long
recordings.
"""

from __future__ import annotations

import math
from typing import List

from .config import ASSUMED_BITRATE, MAX_CHUNK_BYTES, WARN_CHUNK_BYTES
from .models import AudioClip, Chunk


def needs_chunking(clip: AudioClip, max_bytes: int = MAX_CHUNK_BYTES) -> bool:
    return clip.length > max_bytes


def is_approaching_limit(clip: AudioClip) -> bool:
    return clip.length > WARN_CHUNK_BYTES


def estimate_duration(clip: AudioClip, bitrate: int = ASSUMED_BITRATE) -> float:
    return (clip.length * 8) / bitrate


def size_in_mb(clip: AudioClip) -> float:
    return clip.length / (1024 * 1024)


def plan(
    clip: AudioClip,
    max_bytes: int = MAX_CHUNK_BYTES,
    bitrate: int = ASSUMED_BITRATE,
) -> List[Chunk]:
    """
    Split a clip into ceil(length / max_bytes) contiguous chunks.
    The estimated total duration is divided evenly across the chunks.
    """
    if clip.length == 0:
        return []

    total = math.ceil(clip.length / max_bytes)
    chunk_duration = estimate_duration(clip, bitrate) / total

    chunks: List[Chunk] = []
    for i in range(total):
        start = i * max_bytes
        end = min(start + max_bytes, clip.length)
        chunks.append(Chunk(
            payload=clip.data[start:end],
            index=i,
            start_time_offset=i * chunk_duration,
            end_time_offset=(i + 1) * chunk_duration,
        ))
    return chunks


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
