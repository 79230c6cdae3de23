import json
import logging
import re
from typing import Any, Optional

from livekit.agents import ChatContext
from livekit.plugins import openai

logger = logging.getLogger(__name__)

class LLMService:
    """Thin wrapper around the LiveKit OpenAI LLM plugin.

    A fresh plugin instance is built for every completion because Flask runs
    each request on its own event loop and the underlying HTTP client must
    not outlive the loop it was created on.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini"):
        self.api_key = api_key
        self.model = model
        if not self.api_key:
            logger.warning("OpenAI API key not found - LLM features will use fallbacks")

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Run a single chat completion and return the streamed text."""
        if not self.available:
            raise RuntimeError("LLM is not configured")

        llm = openai.LLM(model=self.model, api_key=self.api_key)
        try:
            chat_ctx = ChatContext()
            if system_prompt:
                chat_ctx.add_message(role="system", content=system_prompt)
            chat_ctx.add_message(role="user", content=prompt)

            text = ""
            async with llm.chat(chat_ctx=chat_ctx) as stream:
                async for chunk in stream:
                    if chunk.delta and hasattr(chunk.delta, 'content'):
                        text += chunk.delta.content or ""
            logger.info(f"LLM response received, length: {len(text)} characters")
            return text
        finally:
            await llm.aclose()

    @staticmethod
    def extract_json(response_text: str) -> Any:
        """Parse a JSON payload, tolerating markdown code fences around it."""
        if "```" in response_text:
            match = re.search(r'```(?:json)?\s*(.*?)\s*```', response_text, re.DOTALL)
            if match:
                response_text = match.group(1).strip()
        return json.loads(response_text.strip())
