import json
import time
import logging
import uuid
from typing import Optional
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

from config import LOG_LEVEL, settings
from models import ChatRequest, ChatResponse, Message, ToolCall
from agent import run_agent


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "level": record.levelname,
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if hasattr(record, "extra_data"):
            base.update(getattr(record, "extra_data"))
        return json.dumps(base)


handler = logging.StreamHandler()
if settings.logging.json_logging:
    handler.setFormatter(JsonFormatter())
logger = logging.getLogger("app")
logger.setLevel(LOG_LEVEL)
logger.addHandler(handler)
logger.propagate = False

REQUEST_COUNTER: Optional[Counter] = None
REQUEST_LATENCY: Optional[Histogram] = None


def init_metrics(registry=REGISTRY) -> None:
    global REQUEST_COUNTER, REQUEST_LATENCY
    if REQUEST_COUNTER is None:
        REQUEST_COUNTER = Counter(
            "chat_requests_total",
            "Total /chat requests",
            ["status"],
            registry=registry,
        )
    if REQUEST_LATENCY is None:
        REQUEST_LATENCY = Histogram(
            "chat_request_seconds",
            "Latency of /chat requests in seconds",
            registry=registry,
        )


app = FastAPI(title="Tool-calling Chat Assistant", version="1.0.0")


@app.get("/healthz", response_class=PlainTextResponse)
def healthz():
    return "ok"


@app.get("/metrics")
def metrics():
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest):
    init_metrics()
    request_id = str(uuid.uuid4())
    start = time.time()

    *history, last = req.messages
    llm_kwargs = {"temperature": req.temperature, "model": req.model}
    try:
        new_messages = await run_agent(
            last.content,
            messages=history,
            tools=None if (req.use_tools and settings.agent.enable_tools) else {},
            **llm_kwargs,
        )
        # pair each tool call with the tool message that answered it
        calls = {}
        for msg in new_messages:
            for tc in msg.get("tool_calls", []):
                calls[tc["id"]] = tc["function"]
        tool_calls = [
            ToolCall(tool=calls[m["tool_call_id"]]["name"],
                     input=json.loads(calls[m["tool_call_id"]]["arguments"] or "{}"),
                     result=m["content"])
            for m in new_messages if m["role"] == "tool"
        ]
        resp = ChatResponse(
            response=new_messages[-1]["content"],
            messages=[Message(**m) for m in new_messages],
            tool_calls=tool_calls,
        )
        REQUEST_COUNTER.labels(status="200").inc()
        REQUEST_LATENCY.observe(time.time() - start)
        logger.info(
            "Handled chat",
            extra={"extra_data": {"request_id": request_id, "tool_calls": len(tool_calls)}}
        )
        return JSONResponse(status_code=200, content=json.loads(resp.model_dump_json()))
    except Exception as e:
        REQUEST_COUNTER.labels(status="500").inc()
        logger.exception("Chat error", extra={"extra_data": {"request_id": request_id}})
        return JSONResponse(status_code=500, content={
            "response": "Sorry, something went wrong.",
            "messages": [],
            "tool_calls": [],
            "error": str(e),
        })
