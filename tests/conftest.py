import json
import pytest

from llm.openai_client import get_client

OPENAI_BASE = "https://api.openai.com/v1"
CHAT_URL = f"{OPENAI_BASE}/chat/completions"
IMAGES_URL = f"{OPENAI_BASE}/images/generations"


@pytest.fixture(autouse=True)
def openai_env(monkeypatch):
    """
    Every test talks to a fresh client pointed at the public endpoint; httpx_mock
    intercepts the SDK's transport so nothing leaves the process.
    """
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    get_client.cache_clear()
    yield
    get_client.cache_clear()


def chat_completion(content=None, tool_calls=None, model="gpt-4o-mini"):
    message = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [{
            "index": 0,
            "message": message,
            "finish_reason": "tool_calls" if tool_calls else "stop",
        }],
    }


def tool_call(name, arguments, call_id="call_1"):
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments)},
    }


def sent_json(request):
    return json.loads(request.content)
