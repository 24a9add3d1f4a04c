"""
Audio utility functions for the Workday Voice Agent.

Helpers for inspecting and slicing 16-bit PCM audio: format validation,
duration, signal level and splitting a recording into upload-sized chunks.
"""

import math
from typing import List

import numpy as np

from workday_agent.config.logging_config import get_logger

logger = get_logger(__name__)


def validate_audio_format(
    sample_rate: int,
    channels: int,
    sample_width: int
) -> bool:
    """
    Validate that audio format is supported by OpenAI's Realtime API.

    Args:
        sample_rate: Sample rate in Hz
        channels: Number of audio channels
        sample_width: Sample width in bytes

    Returns:
        bool: True if format is supported
    """
    if sample_rate != 24000:
        logger.warning(f"Sample rate {sample_rate} Hz may not be supported. OpenAI requires 24000 Hz.")
        return False

    if channels != 1:
        logger.warning(f"Channel count {channels} may not be supported. OpenAI requires mono audio.")
        return False

    if sample_width != 2:
        logger.warning(f"Sample width {sample_width * 8} bits may not be supported. OpenAI requires 16-bit PCM.")
        return False

    return True


def get_audio_duration(
    audio_data: bytes,
    sample_rate: int,
    channels: int = 1,
    sample_width: int = 2
) -> float:
    """
    Calculate the duration of PCM audio in seconds.

    Args:
        audio_data: Raw PCM bytes
        sample_rate: Sample rate in Hz
        channels: Number of audio channels
        sample_width: Sample width in bytes

    Returns:
        float: Duration in seconds
    """
    if sample_rate <= 0:
        return 0.0
    num_frames = len(audio_data) // (channels * sample_width)
    return num_frames / sample_rate


def peak_level_dbfs(audio_data: bytes) -> float:
    """
    Peak level of 16-bit PCM audio in dBFS.

    Returns ``-inf`` for empty or fully silent audio.
    """
    usable = len(audio_data) - (len(audio_data) % 2)
    if usable == 0:
        return float("-inf")

    samples = np.frombuffer(audio_data[:usable], dtype=np.int16).astype(np.float32)
    peak = float(np.max(np.abs(samples))) / 32768.0
    if peak == 0.0:
        return float("-inf")
    return 20.0 * math.log10(peak)


def split_audio_chunks(audio_data: bytes, max_chunk_bytes: int) -> List[bytes]:
    """
    Split audio into consecutive chunks of at most ``max_chunk_bytes``.

    Chunk boundaries are kept on whole 16-bit samples.

    Args:
        audio_data: Raw PCM bytes
        max_chunk_bytes: Upper bound for the size of each chunk

    Returns:
        List[bytes]: Chunks in order; empty input gives an empty list
    """
    if max_chunk_bytes < 2:
        raise ValueError("max_chunk_bytes must be at least one sample (2 bytes)")

    step = max_chunk_bytes - (max_chunk_bytes % 2)
    return [audio_data[i:i + step] for i in range(0, len(audio_data), step)]
