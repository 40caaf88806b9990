# src/tasklane/llm/offline.py

from __future__ import annotations


class OfflineExtractionClient:
    """
    Extraction client used when no external API is configured.

    It never answers, so assisted ingestion always takes the line-by-line
    fallback and breakdown is a no-op. No network access.
    """

    async def complete(
        self,
        *,
        instruction: str,
        prompt: str,
        context: str | None = None,
    ) -> str:
        raise RuntimeError(
            "Extraction service is not configured. Set TASKLANE_LLM_API_KEY to enable it."
        )

    async def aclose(self) -> None:
        return
