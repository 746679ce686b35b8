# preopd/llm/client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Dict, Optional

import structlog
from openai import OpenAI

from preopd.config import Settings, get_settings


logger = structlog.get_logger(__name__)


class LLMClient(ABC):
    """
    Chat-completion provider used by the summarizer.
    """

    @abstractmethod
    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        """
        messages: list of {"role": "system"|"user"|"assistant", "content": "..."}
        returns: assistant content as a string ("" when the provider sent none)
        """
        ...


class OpenAILLMClient(LLMClient):
    """
    Any OpenAI-compatible chat completions endpoint (OpenAI, Groq, ...).
    """

    def __init__(self, settings: Optional[Settings] = None, model: Optional[str] = None):
        settings = settings or get_settings()
        if not settings.openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY is not set in environment (.env)."
            )

        self.client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        self.default_model = model or settings.llm_model

    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        model = model or self.default_model
        logger.debug("llm_chat_request", model=model, messages=len(messages))
        completion = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
        )
        if not completion.choices:
            logger.warning("llm_chat_no_choices", model=model)
            return ""
        content = completion.choices[0].message.content
        return content or ""
