"""
Transcription module - Speech-to-text abstraction layer.

Factory function for creating STT instances based on provider configuration.
"""

from .base import BaseTranscriber, NullTranscriber

__all__ = ["BaseTranscriber", "NullTranscriber", "create_transcriber"]


def create_transcriber(provider: str, **kwargs) -> BaseTranscriber:
    """
    Factory function to create an STT instance based on provider.

    Args:
        provider: STT provider name ("gemini", "whisper", "none")
        **kwargs: Provider-specific configuration. ``whisper`` requires
            ``transcode_queue``; ``gemini`` falls back to ``NullTranscriber``
            when no API key is available.

    Returns:
        BaseTranscriber implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "gemini":
        from src.core.config import get_settings

        from .gemini import GeminiTranscriber

        if not (kwargs.get("api_key") or get_settings().gemini_api_key):
            return NullTranscriber("GEMINI_API_KEY is not set")
        return GeminiTranscriber(**kwargs)
    elif provider == "whisper" or provider == "local":
        from .whisper import WhisperTranscriber

        return WhisperTranscriber(**kwargs)
    elif provider == "none":
        return NullTranscriber()
    else:
        raise ValueError(f"Unknown STT provider: {provider}")
