"""Text generation backends."""

from src.llm.gemini import GeminiGenerator, GenerationError

__all__ = ["GeminiGenerator", "GenerationError"]
