from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Type, Union

from openai import pydantic_function_tool
from openai.types.chat import ChatCompletionToolParam
from pydantic import BaseModel, Field, model_validator
from pydantic_core import to_json


Role = Literal["system", "user", "assistant", "tool"]
Content = Union[str, List[Dict[str, Any]]]


def content_text(content: Optional[Content]) -> str:
    """Text of a message content, joining the text parts of a parts list."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "\n".join(part.get("text", "") for part in content if part.get("type") == "text")


class Message(BaseModel):
    role: Role
    content: Optional[Content] = None
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[Dict[str, Any]]] = None

    def to_param(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# Anything run_llm accepts as one conversation entry
AIMessage = Union[Message, Dict[str, Any]]


def as_params(messages: List[AIMessage]) -> List[Dict[str, Any]]:
    return [m.to_param() if isinstance(m, Message) else dict(m) for m in messages]


@dataclass(frozen=True)
class ToolDefinition:
    """Static description of a tool the model may call.

    ``parameters`` is the pydantic model the arguments are validated against,
    ``description`` is what the model reads when deciding to call it.
    """
    name: str
    parameters: Type[BaseModel]
    description: str

    def to_openai_tool(self) -> ChatCompletionToolParam:
        return pydantic_function_tool(self.parameters, name=self.name, description=self.description)

    def parse_arguments(self, raw: str) -> BaseModel:
        return self.parameters.model_validate_json(raw or "{}")


ToolFn = Callable[..., Awaitable[Any]]  # async (tool_args, user_message, client) -> result


@dataclass(frozen=True)
class Tool:
    definition: ToolDefinition
    handler: ToolFn

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass(frozen=True)
class ToolCallResult:
    tool_name: str
    tool_call_id: str
    arguments: BaseModel
    result: Any

    def to_message(self) -> Dict[str, Any]:
        content = self.result if isinstance(self.result, str) else to_json(self.result).decode()
        return {"role": "tool", "tool_call_id": self.tool_call_id, "content": content}


class ChatRequest(BaseModel):
    messages: List[Message] = Field(..., min_length=1, description="Conversation so far, last entry is the user turn")
    use_tools: bool = Field(True, description="Expose the registered tools to the model")
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    model: Optional[str] = None

    @model_validator(mode="after")
    def check_last_turn(self) -> "ChatRequest":
        last = self.messages[-1]
        if last.role != "user":
            raise ValueError("Last message must come from the user")
        if not last.content:
            raise ValueError("Last message must have content")
        return self


class ToolCall(BaseModel):
    tool: str
    input: Dict[str, Any]
    result: Any


class ChatResponse(BaseModel):
    response: Optional[str]
    messages: List[Message] = []
    tool_calls: List[ToolCall] = []
