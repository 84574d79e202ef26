"""
Módulo de voz.

Provee transcripción (speech-to-text) y síntesis (text-to-speech)
con OpenAI o Groq.
"""

from brokerdesk.speech.providers import (
    get_speech_provider,
    BaseSpeechProvider,
    OpenAISpeechProvider,
    GroqSpeechProvider,
    SynthesizedAudio,
)

__all__ = [
    "get_speech_provider",
    "BaseSpeechProvider",
    "OpenAISpeechProvider",
    "GroqSpeechProvider",
    "SynthesizedAudio",
]
