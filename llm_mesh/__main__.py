"""
Stream a Claude reply to stdout.

    ANTHROPIC_API_KEY=... python -m llm_mesh "Explain the theory of relativity"
"""

import argparse
import asyncio
import logging
import sys

from llm_mesh.config import settings, setup_logging
from llm_mesh.models.message import Message, MessageRequest
from llm_mesh.models.stream import ContentBlockDeltaEvent, ErrorEvent, MessageStopEvent
from llm_mesh.providers.anthropic import AnthropicProvider
from llm_mesh.utils.exceptions import ProviderError

logger = logging.getLogger("llm_mesh")


async def stream_reply(prompt: str, model: str, max_tokens: int) -> int:
    request = MessageRequest(model=model, max_tokens=max_tokens, messages=[Message.user(prompt)])

    async with AnthropicProvider.from_settings() as provider:
        async with provider.stream_message(request) as stream:
            async for chunk in stream:
                if not chunk.ok:
                    logger.warning(f"Skipping event: {chunk.error}")
                    continue
                event = chunk.event
                if isinstance(event, ContentBlockDeltaEvent):
                    sys.stdout.write(event.delta.text)
                    sys.stdout.flush()
                elif isinstance(event, ErrorEvent):
                    logger.error(f"Stream error: {event.error.type} {event.error.message}")
                    return 1
                elif isinstance(event, MessageStopEvent):
                    break
    sys.stdout.write("\n")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="llm_mesh", description=__doc__.strip().splitlines()[0])
    parser.add_argument("prompt")
    parser.add_argument("--model", default="claude-3-5-sonnet-20240620")
    parser.add_argument("--max-tokens", type=int, default=1024)
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if settings.debug else logging.WARNING)
    try:
        return asyncio.run(stream_reply(args.prompt, args.model, args.max_tokens))
    except ProviderError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
