import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessage

from config.settings import settings
from models import AIMessage, ToolDefinition, as_params

openai_cfg = settings.openai

_DEFAULT = object()


class OpenAIClient:
    def __init__(self, client: Optional[AsyncOpenAI] = None):
        # retries are left to the caller, the SDK must not resend on its own
        self.client = client or AsyncOpenAI(
            api_key=openai_cfg.api_key,
            base_url=openai_cfg.base_url,
            timeout=openai_cfg.request_timeout_seconds,
            max_retries=0,
        )
        self.logger = logging.getLogger("app")

    def build_request(
        self,
        messages: List[AIMessage],
        tools: Optional[Sequence[ToolDefinition]] = None,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Shape the chat.completions.create kwargs for one invocation."""
        params = as_params(messages)
        if system_prompt:
            params = [{"role": "system", "content": system_prompt}] + params
        request: Dict[str, Any] = {
            "model": model or openai_cfg.chat_model,
            "temperature": openai_cfg.temperature if temperature is None else temperature,
            "messages": params,
        }
        if tools:
            request["tools"] = [t.to_openai_tool() for t in tools]
            request["tool_choice"] = "auto"
            request["parallel_tool_calls"] = False
        return request

    async def run_llm(
        self,
        messages: List[AIMessage],
        tools: Optional[Sequence[ToolDefinition]] = None,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
        system_prompt: Any = _DEFAULT,
    ) -> ChatCompletionMessage:
        """Send the conversation and return the assistant message.

        The configured system prompt is prepended unless ``system_prompt`` is
        given; pass ``None`` to send ``messages`` as they are. The returned
        message either has text ``content`` or exactly one entry in
        ``tool_calls``.
        """
        if system_prompt is _DEFAULT:
            system_prompt = openai_cfg.system_prompt
        request = self.build_request(messages, tools, temperature, model, system_prompt)
        self.logger.info(
            f"Chat completion model={request['model']} temperature={request['temperature']} "
            f"messages={len(request['messages'])} tools={len(request.get('tools', []))}"
        )
        resp = await self.client.chat.completions.create(**request)
        message = resp.choices[0].message
        if message.tool_calls:
            self.logger.debug(f"Model requested tool {message.tool_calls[0].function.name}")
        return message

    async def ask(
        self,
        messages: List[AIMessage],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> Optional[str]:
        """Plain text completion: no system prompt, no tools."""
        message = await self.run_llm(messages, temperature=temperature, model=model, system_prompt=None)
        return message.content

    async def generate_image(self, prompt: str) -> str:
        self.logger.info(f"Image generation model={openai_cfg.image_model} prompt_len={len(prompt)}")
        resp = await self.client.images.generate(
            model=openai_cfg.image_model,
            prompt=prompt,
            n=1,
            size=openai_cfg.image_size,
        )
        url = resp.data[0].url
        if not url:
            raise ValueError("Image generation returned no url")
        return url


@lru_cache(maxsize=1)
def get_client() -> OpenAIClient:
    return OpenAIClient()
