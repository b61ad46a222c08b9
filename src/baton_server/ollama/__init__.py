"""Ollama client wrapper used for the orchestrator's reasoning call."""

from baton_server.ollama.client import DEFAULT_OPTIONS, OllamaClient

__all__ = ["OllamaClient", "DEFAULT_OPTIONS"]
