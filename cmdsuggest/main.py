"""Command suggestion entrypoint.

Reads input buffers from stdin and prints the suggested line for each
(an empty line when there is none). A line starting with ``!`` is
submitted to history instead.
"""

import asyncio
import logging
import sys

import structlog

from cmdsuggest.config import get_settings
from cmdsuggest.service import SuggestionService

SUBMIT_PREFIX = "!"


def setup_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            (
                structlog.dev.ConsoleRenderer()
                if sys.stderr.isatty()
                else structlog.processors.JSONRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout carries suggestions
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    logger = structlog.get_logger()
    logger.info(
        "Starting command suggestion service",
        version=settings.service_version,
        predictor_url=settings.predictor_url,
    )

    history: list[str] = []
    service = SuggestionService(settings, history=lambda: history)
    loop = asyncio.get_running_loop()

    try:
        await service.start()
        while True:
            raw = await loop.run_in_executor(None, sys.stdin.readline)
            if not raw:
                break
            line = raw.rstrip("\n")
            if line.startswith(SUBMIT_PREFIX):
                submitted = line[len(SUBMIT_PREFIX):]
                service.submit(submitted)
                history.append(submitted)
                continue
            print(service.suggest(line) or "", flush=True)
    finally:
        await service.stop()
        logger.info("Command suggestion service stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
