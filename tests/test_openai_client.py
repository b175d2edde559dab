import httpx
import openai
import pytest

from conftest import CHAT_URL, IMAGES_URL, chat_completion, sent_json, tool_call
from config.settings import settings
from llm.openai_client import OpenAIClient, get_client
from tools.generate_image import generate_image_tool_definition


@pytest.mark.asyncio
async def test_ask_hello_sends_exactly_the_input(httpx_mock):
    """
    messages=[{role: user, content: hello}] without tools: one request carrying just
    that message, the first choice's text comes back.
    """
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion("Hi there!"))

    result = await get_client().ask([{"role": "user", "content": "hello"}])

    assert result == "Hi there!"
    requests = httpx_mock.get_requests()
    assert len(requests) == 1
    body = sent_json(requests[0])
    assert body["messages"] == [{"role": "user", "content": "hello"}]
    assert "tools" not in body
    assert "tool_choice" not in body
    assert "parallel_tool_calls" not in body


@pytest.mark.asyncio
async def test_run_llm_prefixes_system_prompt(httpx_mock):
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion("ok"))
    messages = [{"role": "user", "content": "hello"}, {"role": "assistant", "content": "hey"},
                {"role": "user", "content": "draw a cat"}]

    await get_client().run_llm(messages)

    body = sent_json(httpx_mock.get_request())
    assert body["messages"][0] == {"role": "system", "content": settings.openai.system_prompt}
    assert body["messages"][1:] == messages


@pytest.mark.asyncio
async def test_run_llm_without_system_prompt(httpx_mock):
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion("ok"))

    await get_client().run_llm([{"role": "user", "content": "hello"}], system_prompt=None)

    assert sent_json(httpx_mock.get_request())["messages"] == [{"role": "user", "content": "hello"}]


@pytest.mark.asyncio
async def test_defaults_for_model_and_temperature(httpx_mock):
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion("ok"))

    await get_client().run_llm([{"role": "user", "content": "hello"}])

    body = sent_json(httpx_mock.get_request())
    assert body["model"] == settings.openai.chat_model == "gpt-4o-mini"
    assert body["temperature"] == settings.openai.temperature == 0.1


@pytest.mark.asyncio
async def test_overrides_for_model_and_temperature(httpx_mock):
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion("ok", model="gpt-4o"))

    await get_client().run_llm([{"role": "user", "content": "hello"}], temperature=0.0, model="gpt-4o")

    body = sent_json(httpx_mock.get_request())
    assert body["model"] == "gpt-4o"
    assert body["temperature"] == 0.0


@pytest.mark.asyncio
async def test_tools_request_disables_parallel_calls(httpx_mock):
    call = tool_call("generate_image", {"prompt": "a red fox in snow"})
    httpx_mock.add_response(method="POST", url=CHAT_URL, json=chat_completion(tool_calls=[call]))

    message = await get_client().run_llm(
        [{"role": "user", "content": "draw a fox"}], tools=[generate_image_tool_definition]
    )

    body = sent_json(httpx_mock.get_request())
    assert body["parallel_tool_calls"] is False
    assert body["tool_choice"] == "auto"
    assert [t["function"]["name"] for t in body["tools"]] == ["generate_image"]

    assert message.content is None
    assert len(message.tool_calls) == 1
    args = generate_image_tool_definition.parse_arguments(message.tool_calls[0].function.arguments)
    assert args.prompt == "a red fox in snow"


def test_build_request_with_tools_always_sets_parallel_false():
    client = OpenAIClient(openai.AsyncOpenAI(api_key="sk-test"))
    for temperature in (None, 0.0, 1.5):
        request = client.build_request(
            [{"role": "user", "content": "hi"}], tools=[generate_image_tool_definition], temperature=temperature
        )
        assert request["parallel_tool_calls"] is False


@pytest.mark.asyncio
async def test_generate_image_request_shape(httpx_mock):
    httpx_mock.add_response(
        method="POST", url=IMAGES_URL,
        json={"created": 1700000000, "data": [{"url": "https://images.example.com/fox.png"}]},
    )

    url = await get_client().generate_image("a red fox in snow")

    assert url == "https://images.example.com/fox.png"
    body = sent_json(httpx_mock.get_request())
    assert body == {"model": "dall-e-3", "prompt": "a red fox in snow", "n": 1, "size": "1024x1024"}


@pytest.mark.asyncio
async def test_server_error_propagates_without_retry(httpx_mock):
    httpx_mock.add_response(method="POST", url=CHAT_URL, status_code=500,
                            json={"error": {"message": "boom", "type": "server_error"}})

    with pytest.raises(openai.InternalServerError):
        await get_client().ask([{"role": "user", "content": "hello"}])
    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
async def test_network_error_propagates(httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("connection refused"), method="POST", url=CHAT_URL)

    with pytest.raises(openai.APIConnectionError):
        await get_client().ask([{"role": "user", "content": "hello"}])
