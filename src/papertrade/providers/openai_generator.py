"""OpenAI-backed insight generator."""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from papertrade.core.exceptions import InsightGenerationError

logger = logging.getLogger(__name__)


class OpenAIInsightGenerator:
    """
    Sends a single user prompt to the chat completions API and returns the text.

    No retries: a failed generation is reported and the user re-invokes it.
    """

    SYSTEM_PROMPT = "You are an expert financial advisor. Reply with raw JSON only."

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise InsightGenerationError("Insight generation failed") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise InsightGenerationError("Empty response from insight generator")
        return content
