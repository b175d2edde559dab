from __future__ import annotations
from typing import Any


PROMPTS: dict[str, Any] = {}


PROMPTS['system'] = """
You are a helpful AI assistant. Answer the user's questions to the best of your ability.
You can generate images with the generate_image tool when the user asks for one.
If you are unsure what image the user wants, ask them for more details instead of guessing.
""".strip()


if __name__ == '__main__':
    print(PROMPTS['system'])
