#!/usr/bin/env python3
"""Entry point for the battle vote timeout sweeper."""

from __future__ import annotations

import asyncio
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from battle_voting.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from battle_voting.config.settings import Settings

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_FALLBACK_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(log_level: str = "INFO", config_path: Path = LOGGING_CONFIG_PATH) -> None:
    """Apply ``logging_config.json``, then force the root level to ``log_level``."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    try:
        logging.config.dictConfig(json.loads(config_path.read_text(encoding="utf-8")))
    except (OSError, ValueError) as exc:
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT)
        logging.getLogger(__name__).warning(
            "Logging config %s unusable (%s), using basic config", config_path, exc
        )

    logging.getLogger().setLevel(level)


async def run(settings: Settings, stop_event: asyncio.Event | None = None) -> None:
    """Sweep expired battles until ``stop_event`` is set."""
    from battle_voting.config.container import create_container

    container = create_container(settings)
    stop_event = stop_event or asyncio.Event()

    await container.initialize()
    try:
        container.sweep_job.start()
        await stop_event.wait()
    finally:
        await container.shutdown()


def main() -> int:
    from battle_voting.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    if not settings.sweep.enabled:
        logger.warning(LogTemplates.SWEEPER_DISABLED)
        return 0

    logger.info(LogTemplates.SWEEPER_STARTING.format(environment=settings.environment))

    try:
        asyncio.run(run(settings))
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.SWEEPER_STOPPED)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.SWEEPER_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
