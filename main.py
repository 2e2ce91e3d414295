import asyncio
import sys
from pathlib import Path
from typing import Optional

from ocrmux import RichPrinter, UnifiedChatClient, setup_logging

SYSTEM_PROMPT = "You are given text recognized from an image. Fix OCR mistakes and summarize it."


async def compare_providers(ocr_text: str, image: Optional[bytes] = None):
    setup_logging()
    printer = RichPrinter(show_metadata=True)

    models = [
        "gpt-4o",
        "claude-3-5-haiku-latest",
        "gemini-2.5-flash",
        "deepseek-chat",
    ]

    async with UnifiedChatClient() as client:
        for model in models:
            result = await client.dispatch(
                model,
                prompt=ocr_text,
                system_instruction=SYSTEM_PROMPT,
                image=image,
                include_image=image is not None,
            )
            printer.print_result(result)


if __name__ == "__main__":
    # usage: main.py [ocr_text_file|-] [image_file]
    args = sys.argv[1:]
    if args and args[0] != "-":
        text = Path(args[0]).read_text()
    else:
        text = sys.stdin.read()
    image = Path(args[1]).read_bytes() if len(args) > 1 else None
    asyncio.run(compare_providers(text, image))
