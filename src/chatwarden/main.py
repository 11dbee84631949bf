"""
Chatwarden
==========

Runs the batched moderation pipeline behind the interactive console host.
Every ``name: message`` line is screened, batched and sent to the moderation
oracle; violating actors are muted for the configured duration.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. CHATWARDEN_HOME environment variable, if set.
    2. If running frozen (PyInstaller, Nuitka), the executable's directory.
    3. Otherwise the repository root above ``src/``.
    """
    if env_home := os.getenv("CHATWARDEN_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()

import asyncio
from dotenv import load_dotenv

from chatwarden.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> None:
    """Load ``.env`` from the base directory so ``OPENAI_API_KEY`` can live there."""
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    if not os.getenv("OPENAI_API_KEY"):
        logger.debug("OPENAI_API_KEY not set; relying on ai_settings.api_key")


async def async_main() -> int:
    """Start the pipeline and console, returning an exit code."""
    from chatwarden.configuration.app_configuration import app_config
    from chatwarden.host.console_host import ConsoleChatHost
    from chatwarden.moderation.moderation_pipeline import ModerationPipeline

    host = ConsoleChatHost()
    try:
        pipeline = ModerationPipeline.from_config(app_config, host)
    except ValueError as exc:
        logger.critical("Invalid moderation configuration: %s", exc)
        return 1

    host.attach(pipeline)
    await pipeline.start()
    try:
        await host.run()
    except asyncio.CancelledError:
        logger.info("Console cancelled; proceeding to shutdown")
    finally:
        await pipeline.shutdown(drain=True)

    return 0


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    os.chdir(BASE_DIR)
    load_environment()
    logger.info("Starting Chatwarden…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except Exception as exc:
        logger.critical("An unexpected error occurred: %s", exc, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
