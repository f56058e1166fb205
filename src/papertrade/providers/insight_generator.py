"""Insight generator protocol."""

from typing import Protocol


class InsightGenerator(Protocol):
    """
    Opaque text-generation capability.

    Given a prompt, returns raw text that is expected to contain a JSON
    payload; extraction and validation are the caller's job. Failures raise
    InsightGenerationError.
    """

    def generate(self, prompt: str) -> str:
        ...
