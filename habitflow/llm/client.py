# File: habitflow/llm/client.py

from openai import AsyncOpenAI
from ..config import settings

def get_openai_client() -> AsyncOpenAI:
    return AsyncOpenAI(
        base_url=settings.LLM_BASE_URL,
        api_key=settings.LLM_API_KEY or "missing-key",
    )

# Singleton instance
async_client = get_openai_client()
