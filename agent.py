import sys
import asyncio
import logging
from typing import Any, Dict, List, Optional

from openai.types.chat import ChatCompletionMessage

from config.settings import settings
from llm.openai_client import OpenAIClient, get_client
from models import AIMessage, Content, Tool, as_params, content_text
from tools import TOOLS, get_tool_definitions, run_tool

agent_cfg = settings.agent
logger = logging.getLogger("app")


def assistant_to_param(message: ChatCompletionMessage) -> Dict[str, Any]:
    param: Dict[str, Any] = {"role": "assistant", "content": message.content}
    if message.tool_calls:
        param["tool_calls"] = [tc.model_dump(exclude_none=True) for tc in message.tool_calls]
    return param


async def run_agent(
    user_message: Content,
    messages: Optional[List[AIMessage]] = None,
    tools: Optional[Dict[str, Tool]] = None,
    client: Optional[OpenAIClient] = None,
    **llm_kwargs: Any,
) -> List[Dict[str, Any]]:
    """Answer ``user_message``, calling tools for as long as the model asks.

    ``messages`` is the prior conversation and is not mutated. Returns the
    messages produced by this turn, user message first. Pass ``tools={}`` to
    run without tools.

    ``user_message`` may be a content-parts list; it is sent as is and tool
    handlers get its text parts. ``client`` is used for the chat calls and
    handed to every tool handler.
    """
    client = client or get_client()
    tools = TOOLS if tools is None else tools
    definitions = get_tool_definitions(tools)
    history = as_params(messages or [])
    new_messages: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]

    for _ in range(agent_cfg.max_iterations):
        response = await client.run_llm(history + new_messages, tools=definitions, **llm_kwargs)
        new_messages.append(assistant_to_param(response))
        if not response.tool_calls:
            return new_messages
        for tool_call in response.tool_calls:
            result = await run_tool(tool_call, content_text(user_message), tools, client)
            new_messages.append(result.to_message())

    raise RuntimeError(f"No final answer after {agent_cfg.max_iterations} model calls")


if __name__ == '__main__':
    logging.basicConfig(level=settings.logging.level)
    prompt = " ".join(sys.argv[1:]) or "Generate an image of a lighthouse at dusk."
    for msg in asyncio.run(run_agent(prompt)):
        print(f"[{msg['role']}] {msg.get('content')}")
