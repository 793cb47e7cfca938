"""
Completion client wrapping the LLM chat model.
"""

from typing import Optional
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import Settings, settings as default_settings
from ..utils import log_processing_info
import logging

logger = logging.getLogger(__name__)


class CompletionClient:
    """Sends a system prompt and a user message to the chat model and returns the text."""
    
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
    
    def is_configured(self) -> bool:
        return self.settings.llm_is_configured()
    
    def _initialize_llm(
        self,
        max_tokens: Optional[int],
        temperature: Optional[float],
        timeout: Optional[float]
    ) -> ChatGoogleGenerativeAI:
        """Initialize the language model for a single call."""
        return ChatGoogleGenerativeAI(
            model=self.settings.google_chat_model,
            api_key=self.settings.google_api_key,
            temperature=self.settings.google_temperature if temperature is None else temperature,
            max_output_tokens=max_tokens or self.settings.google_max_tokens,
            timeout=timeout or self.settings.chat_timeout_seconds,
            max_retries=self.settings.google_max_retries
        )
    
    def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None
    ) -> str:
        """
        Generate a completion.
        
        Args:
            system_prompt: Instructions sent as the system message
            user_message: The user's message
            max_tokens: Maximum output tokens, settings default if None
            temperature: Sampling temperature, settings default if None
            timeout: Request timeout in seconds, chat timeout if None
            
        Returns:
            Generated text
        """
        llm = self._initialize_llm(max_tokens, temperature, timeout)
        response = llm.invoke([
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_message)
        ])
        text = _content_to_text(response.content)
        
        log_processing_info("Completion generated", {
            "model": self.settings.google_chat_model,
            "system_prompt_length": len(system_prompt),
            "user_message_length": len(user_message),
            "response_length": len(text)
        })
        return text


def _content_to_text(content) -> str:
    # Newer chat models may return a list of content parts
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
