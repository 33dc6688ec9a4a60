from .openai_compatible import OpenAICompatibleClient

__all__ = ["OpenAICompatibleClient"]
