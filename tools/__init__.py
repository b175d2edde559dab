import logging
from typing import Dict, List, Optional

from openai.types.chat import ChatCompletionMessageToolCall

from llm.openai_client import OpenAIClient, get_client
from models import Tool, ToolCallResult, ToolDefinition
from tools.generate_image import generate_image_tool

logger = logging.getLogger("app")

TOOLS: Dict[str, Tool] = {
    generate_image_tool.name: generate_image_tool,
}


def get_tool_definitions(tools: Optional[Dict[str, Tool]] = None) -> List[ToolDefinition]:
    return [t.definition for t in (TOOLS if tools is None else tools).values()]


async def run_tool(
    tool_call: ChatCompletionMessageToolCall,
    user_message: str,
    tools: Optional[Dict[str, Tool]] = None,
    client: Optional[OpenAIClient] = None,
) -> ToolCallResult:
    """Validate the model's arguments and await the matching handler."""
    tools = TOOLS if tools is None else tools
    name = tool_call.function.name
    if name not in tools:
        raise KeyError(f"Tool '{name}' is not registered.")
    tool = tools[name]
    args = tool.definition.parse_arguments(tool_call.function.arguments)
    logger.info(f"Running tool {name} call_id={tool_call.id}")
    result = await tool.handler(tool_args=args, user_message=user_message, client=client or get_client())
    return ToolCallResult(tool_name=name, tool_call_id=tool_call.id, arguments=args, result=result)
