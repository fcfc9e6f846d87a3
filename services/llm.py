from typing import Optional
from langchain_google_genai import ChatGoogleGenerativeAI
from logger_manager import log_info, log_warning

from env import LLM_API_KEY, LLM_MODEL_NAME, LLM_TEMPERATURE


def create_llm(api_key: Optional[str] = LLM_API_KEY, temperature: float = LLM_TEMPERATURE) -> Optional[ChatGoogleGenerativeAI]:
    """Build the chat model once at startup, None when no key is configured."""
    if not api_key:
        log_warning("LLM_API_KEY not set, ingredient analysis and text search will degrade")
        return None

    log_info(f"Initializing LLM {LLM_MODEL_NAME}")
    return ChatGoogleGenerativeAI(
        google_api_key=api_key,
        model=LLM_MODEL_NAME,
        temperature=temperature,
    )
