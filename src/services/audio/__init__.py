"""
Audio module - PCM helpers and the shared transcoding queue.
"""

from .processor import AudioProcessor
from .transcoder import TranscodeQueue

__all__ = ["AudioProcessor", "TranscodeQueue"]
