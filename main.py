import asyncio
import sys
from loguru import logger

from catalog.app import CatalogApp
from catalog.config import LOG_LEVEL
from catalog.models import IdeaType

COMMANDS = ("preload", "refresh", "info", "clear")


async def report_counts(app: CatalogApp):
    """Log how many records each repository currently serves."""
    for repository in app.registry.repositories:
        items = await repository.get_all()
        logger.info(f"{repository.name}: {len(items)} records")
    for idea_type in IdeaType:
        summary = await app.get_completion_summary(idea_type)
        logger.info(
            f"{idea_type.value} ideas: {summary.completed_percent}% of letters completed "
            f"({len(summary.completed_letters)}/{summary.total_letters})"
        )


async def main(command: str = "preload"):
    """
    Build the data layer, run one command and close the remote session.

    - preload: warm caches and refresh from the remote store when online.
    - refresh: force a re-fetch of every collection.
    - info: show what is stored on the device.
    - clear: remove every cached collection from memory and the device.
    """
    # Initialize logs
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    app = CatalogApp()
    try:
        await app.initialize()

        if command == "refresh":
            ok = await app.refresh()
            logger.info("Refresh succeeded" if ok else "Refresh failed")
            await report_counts(app)
        elif command == "info":
            for name, info in (await app.cache_info()).items():
                if info is None:
                    logger.info(f"{name}: not cached")
                else:
                    logger.info(f"{name}: {info['size_kb']} KB, last updated {info['last_updated']}")
        elif command == "clear":
            await app.clear_all_caches()
        else:
            await report_counts(app)
    finally:
        # Cleanup: close the remote session to prevent unclosed connector warnings
        await app.close()


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "preload"
    if command not in COMMANDS:
        print(f"Usage: python main.py [{'|'.join(COMMANDS)}]")
        sys.exit(2)
    asyncio.run(main(command))
