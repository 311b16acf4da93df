"""Configuration settings for splitcommit."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables at module level
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"


@dataclass(frozen=True)
class Config:
    """Main configuration settings."""

    api_key: str | None
    default_model: str
    temperature: float
    api_url: str
    request_timeout: float
    max_attempts: int
    backoff_ms: int

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables.

        The API key is optional here; the classifier refuses to run without it.
        """
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            default_model=os.getenv("MODEL_NAME", "gpt-4o-mini"),
            temperature=float(os.getenv("TEMPERATURE", "0.7")),
            api_url=os.getenv("API_URL", DEFAULT_API_URL),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
            max_attempts=max(1, int(os.getenv("LLM_MAX_ATTEMPTS", "3"))),
            backoff_ms=max(100, int(os.getenv("LLM_BACKOFF_MS", "400"))),
        )


# Global configuration instance
config = Config.from_env()
