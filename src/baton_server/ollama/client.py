"""Async Ollama client wrapper.

This module provides an async wrapper around ollama.AsyncClient for the
single reasoning call the orchestrator makes: prompt text in, reply text out.
The client is created once at startup and reused.
"""

import logging
from typing import Any

import ollama

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: dict[str, Any] = {
    "temperature": 0.7,
    "top_p": 0.9,
    "top_k": 40,
    "repeat_penalty": 1.1,
    "stop": ["Human:", "User:", "Assistant:", "Agent:"],
}


class OllamaClient:
    """Async client for text generation against an Ollama server.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        model: Model used for generation
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str, model: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            model: Model name used for generation
        """
        self.host = host
        self.model = model
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}, model: {model}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def generate(self, prompt: str, options: dict[str, Any] | None = None) -> str:
        """Generate a completion for a prompt.

        Args:
            prompt: Full prompt text
            options: Model parameters merged over DEFAULT_OPTIONS

        Returns:
            str: The generated text, stripped of surrounding whitespace

        Raises:
            Exception: If the Ollama API request fails
        """
        merged = {**DEFAULT_OPTIONS, **(options or {})}
        try:
            logger.debug(f"Generating with model {self.model} ({len(prompt)} prompt chars)")
            response = await self._client.generate(
                model=self.model,
                prompt=prompt,
                stream=False,
                options=merged,
            )
        except Exception as e:
            logger.error(f"Generation failed: {e}")
            raise

        if hasattr(response, "response"):
            text = response.response
        else:
            text = response.get("response", "")
        return (text or "").strip()

    async def close(self) -> None:
        """Close the client.

        ollama.AsyncClient uses httpx internally and needs no explicit cleanup.
        """
        logger.debug("OllamaClient closed")
