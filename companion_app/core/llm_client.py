from typing import Optional
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from companion_app.core.config import settings
from loguru import logger

chat_llm: Optional[BaseChatModel] = None


def init_chat_llm():
    global chat_llm
    if not settings.GEMINI_API_KEY:
        logger.error("GEMINI_API_KEY is not set; chat is unavailable.")
        chat_llm = None
        return
    try:
        chat_llm = ChatGoogleGenerativeAI(
            model=settings.CHAT_MODEL_NAME,
            google_api_key=settings.GEMINI_API_KEY,
            temperature=settings.CHAT_TEMPERATURE,
        )
        logger.info(f"Google Gemini chat model '{settings.CHAT_MODEL_NAME}' initialized")
    except Exception as e:
        logger.error(f"Failed to initialize google gemini chat model: {e}")
        chat_llm = None


def get_chat_llm() -> BaseChatModel:
    if chat_llm is None:
        init_chat_llm()
    if chat_llm is None:
        logger.error("Chat LLM not initialized. Check GEMINI_API_KEY.")
        raise ValueError("Chat LLM not available.")
    return chat_llm
