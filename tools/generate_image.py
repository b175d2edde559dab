from pydantic import BaseModel, Field

from llm.openai_client import OpenAIClient
from models import Tool, ToolDefinition


class GenerateImageArgs(BaseModel):
    prompt: str = Field(
        ...,
        description=(
            "prompt for the image. Be sure to consider the user original message when making the prompt. "
            "If you are unsure, then ask the user to provide more details."
        ),
    )


generate_image_tool_definition = ToolDefinition(
    name="generate_image",
    parameters=GenerateImageArgs,
    description="Generates an image and returns the url of the image.",
)


async def generate_image(tool_args: GenerateImageArgs, user_message: str, client: OpenAIClient) -> str:
    return await client.generate_image(tool_args.prompt)


generate_image_tool = Tool(definition=generate_image_tool_definition, handler=generate_image)
