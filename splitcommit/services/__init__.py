"""External services used by splitcommit."""

from .ai_service import AIService, Classifier

__all__ = ["AIService", "Classifier"]
