"""Serviços de IA (Gemini) usados por geocodificação e verificação de imagens."""
from .gemini import GeminiClient, MockLanguageModel
from .service import AIService

__all__ = ["AIService", "GeminiClient", "MockLanguageModel"]
