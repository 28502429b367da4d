"""
Gemini chat client.

Streams model output as plain text fragments. Uncached generation goes
through LangChain's ChatGoogleGenerativeAI; generation against a
provider-side context cache goes through the google-genai SDK, which
exposes the cached_content parameter.

Dependencies: langchain_google_genai, langchain_core, google.genai
System role: Language model provider adapter
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from researchly.configs.gemini import GeminiSettings
from researchly.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


def extract_chunk_text(content: Any) -> str:
    """
    Normalise a streamed chunk's content into text.

    Newer Gemini models return content as a list of parts instead of a string.

    Args:
        content: AIMessageChunk.content value

    Returns:
        str: Text carried by the chunk ("" when none)
    """
    if not content:
        return ""
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content)


def to_genai_contents(messages: list[BaseMessage]) -> list[types.Content]:
    """
    Convert LangChain conversation messages to google-genai contents.

    System messages are dropped; with a context cache the system
    instruction already lives in the cache.
    """
    contents = []
    for message in messages:
        if isinstance(message, SystemMessage):
            continue
        role = "model" if isinstance(message, AIMessage) else "user"
        contents.append(types.Content(role=role, parts=[types.Part(text=str(message.content))]))
    return contents


class GeminiChatClient:
    """
    Streaming access to a Gemini generation model.

    One ChatGoogleGenerativeAI instance is kept per temperature so chat
    and definition calls don't rebuild clients on every request.
    """

    def __init__(self, settings: GeminiSettings, genai_client: genai.Client | None = None) -> None:
        """
        Initialize chat client.

        Args:
            settings: Gemini settings (model, api key)
            genai_client: Shared google-genai client used for cached generation
        """
        self._settings = settings
        self._model_id = settings.model_id
        self._api_key = settings.api_key.get_secret_value() or None
        self._genai_client = genai_client or genai.Client(api_key=self._api_key)
        self._models: dict[float, ChatGoogleGenerativeAI] = {}

    def _model_for(self, temperature: float) -> ChatGoogleGenerativeAI:
        model = self._models.get(temperature)
        if model is None:
            model = ChatGoogleGenerativeAI(
                model=self._model_id,
                temperature=temperature,
                google_api_key=self._api_key,
            )
            self._models[temperature] = model
        return model

    async def stream(self, messages: list[BaseMessage], temperature: float) -> AsyncIterator[str]:
        """
        Stream a response for a prompt without a context cache.

        Args:
            messages: System instruction and conversation, oldest first
            temperature: Sampling temperature

        Yields:
            str: Non-empty text fragments in model order

        Raises:
            ProviderError: If the model call fails
        """
        logger.info(
            f"{__name__}:stream - START model={self._model_id}, messages={len(messages)}",
            extra={"temperature": temperature},
        )
        try:
            async for chunk in self._model_for(temperature).astream(messages):
                text = extract_chunk_text(chunk.content)
                if text:
                    yield text
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:stream - FAILED: {type(e).__name__}: {e}")
            raise ProviderError(
                "Language model request failed",
                provider="model",
                details={"error": str(e)},
            ) from e

    async def stream_with_cache(
        self,
        cache_name: str,
        messages: list[BaseMessage],
        temperature: float,
    ) -> AsyncIterator[str]:
        """
        Stream a response grounded on a provider-side context cache.

        Args:
            cache_name: Cache resource name returned at creation
            messages: Conversation, oldest first (system messages ignored)
            temperature: Sampling temperature

        Yields:
            str: Non-empty text fragments in model order

        Raises:
            ProviderError: If the model call fails
        """
        logger.info(
            f"{__name__}:stream_with_cache - START model={self._model_id}, cache={cache_name}",
            extra={"temperature": temperature, "message_count": len(messages)},
        )
        config = types.GenerateContentConfig(cached_content=cache_name, temperature=temperature)
        try:
            stream = await self._genai_client.aio.models.generate_content_stream(
                model=self._model_id,
                contents=to_genai_contents(messages),
                config=config,
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            logger.error(f"{__name__}:stream_with_cache - FAILED: {type(e).__name__}: {e}")
            raise ProviderError(
                "Language model request failed",
                provider="model",
                details={"cache_name": cache_name, "error": str(e)},
            ) from e
