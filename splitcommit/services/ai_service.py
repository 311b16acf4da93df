"""AI service for generating commit messages and change groupings using OpenAI."""

import json
import logging
import time
from typing import Any, Protocol

import requests

from ..config.settings import Config, config as default_config
from ..core.changes import ChangeRecord
from ..core.exceptions import ClassificationError
from ..core.grouping import GroupingResult

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    """Capability the orchestrator needs from a commit-message classifier."""

    def generate_message(
        self, changes: list[ChangeRecord], branch: str, feedback: str | None = None
    ) -> str: ...

    def group_changes(self, changes: list[ChangeRecord], branch: str) -> GroupingResult: ...


def format_changes(changes: list[ChangeRecord]) -> str:
    """Render change records as prompt text, with placeholders for skipped files."""
    return "\n---\n\n".join(
        f"File: {change.path} ({change.status.value})\n{change.classifier_diff()}\n"
        for change in changes
    )


class AIService:
    """Service for interacting with the OpenAI API."""

    def __init__(self, config: Config | None = None):
        self.config = config or default_config

    def _generate_message_prompt(
        self, changes: list[ChangeRecord], branch: str, feedback: str | None
    ) -> str:
        prompt = (
            "You are an expert at writing concise, meaningful git commit messages "
            "following conventional commit standards.\n\n"
            "Analyze the following git changes and generate a commit message.\n\n"
            "Rules:\n"
            "- Use conventional commit format: <type>(<scope>): <description>\n"
            "- Types: feat, fix, docs, style, refactor, test, chore\n"
            "- Keep the first line under 72 characters\n"
            "- Be specific and descriptive\n"
            '- Focus on the "why" and "what", not the "how"\n\n'
            f"Current branch: {branch}\n\n"
        )
        if changes:
            prompt += f"Git changes:\n{format_changes(changes)}\n\n"
        else:
            prompt += (
                "Git changes: no content available (all files in this commit were "
                "excluded from analysis).\n\n"
            )
        if feedback:
            prompt += (
                "The user rejected the previous suggestion with this feedback, "
                f"apply it:\n{feedback}\n\n"
            )
        prompt += "Generate ONLY the commit message, nothing else."
        return prompt

    def _group_changes_prompt(self, changes: list[ChangeRecord], branch: str) -> str:
        return (
            "You are an expert at organizing code changes into small, logical git commits.\n\n"
            "Split the following changes into groups, one commit each. Every file must "
            "belong to exactly one group. If all changes form one logical unit, return a "
            "single group.\n\n"
            f"Current branch: {branch}\n\n"
            f"Git changes:\n{format_changes(changes)}\n\n"
            "Return the response in the following JSON format:\n"
            "{\n"
            '  "groups": [\n'
            "    {\n"
            '      "id": 1,\n'
            '      "type": "feat",\n'
            '      "scope": "api",\n'
            '      "description": "add user endpoint",\n'
            '      "files": ["src/api/users.py"],\n'
            '      "reasoning": "Why these files belong together",\n'
            '      "dependencies": []\n'
            "    }\n"
            "  ],\n"
            '  "totalGroups": 1\n'
            "}\n"
            '"dependencies" lists the ids of groups that must be committed first.'
        )

    def _post(self, prompt: str, json_mode: bool) -> str:
        """Send a prompt and return the response text, retrying failed attempts."""
        if not self.config.api_key:
            raise ClassificationError("OPENAI_API_KEY environment variable is not set.")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        data: dict[str, Any] = {
            "model": self.config.default_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
        }
        if json_mode:
            data["response_format"] = {"type": "json_object"}

        last_error = "unknown error"
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                response = requests.post(
                    self.config.api_url,
                    headers=headers,
                    json=data,
                    timeout=self.config.request_timeout,
                )

                if response.status_code == 400:
                    error_data = response.json()
                    error_message = error_data.get("error", {}).get("message", "Unknown error")
                    raise ClassificationError(f"API Error: {error_message}")

                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]
                if not content or not content.strip():
                    raise ClassificationError("Received empty model response")
                return content.strip()

            except requests.exceptions.RequestException as e:
                response_text = getattr(e.response, "text", None)
                last_error = response_text or str(e)
            except (KeyError, IndexError, ValueError) as e:
                last_error = f"Unexpected API response: {e}"
            except ClassificationError:
                raise

            logger.debug("Classifier attempt %d failed: %s", attempt, last_error)
            if attempt < self.config.max_attempts:
                time.sleep(self.config.backoff_ms * attempt / 1000)

        raise ClassificationError(f"API Request failed: {last_error}")

    def generate_message(
        self, changes: list[ChangeRecord], branch: str, feedback: str | None = None
    ) -> str:
        """Generate a single commit message for the given changes."""
        prompt = self._generate_message_prompt(changes, branch, feedback)
        return self._post(prompt, json_mode=False)

    def group_changes(self, changes: list[ChangeRecord], branch: str) -> GroupingResult:
        """Ask the model to partition changes into ordered commit groups."""
        content = self._post(self._group_changes_prompt(changes, branch), json_mode=True)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Failed to parse API response as JSON: {str(e)}") from e
        if not isinstance(data, dict):
            raise ClassificationError("Classifier response is not a JSON object")
        return GroupingResult.from_dict(data)

    def classify(
        self,
        changes: list[ChangeRecord],
        branch: str,
        feedback: str | None = None,
        grouped: bool = True,
    ) -> GroupingResult | str:
        """Return a grouping in multi-commit mode or a plain message otherwise."""
        if grouped:
            return self.group_changes(changes, branch)
        return self.generate_message(changes, branch, feedback)
