"""LLM provider adapters.

OpenAILLMProvider implements ILLMProvider (luminai/interfaces/llm_provider.py)
against any OpenAI-compatible chat API; OpenRouter is the default host.
main.py builds it once at startup and stores it on FastAPI's app.state.
"""

from luminai.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
