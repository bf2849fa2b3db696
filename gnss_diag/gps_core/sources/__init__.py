"""Sentence sources feeding the pipeline."""

from .base_source import SentenceCallback, SentenceSource
from .replay_source import ReplaySentenceSource
from .serial_source import SerialSentenceSource

__all__ = [
    "ReplaySentenceSource",
    "SentenceCallback",
    "SentenceSource",
    "SerialSentenceSource",
]
