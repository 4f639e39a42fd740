"""
Container for the character-sheet domain modules.

This file provides a convenience function to register every module's
HTTP routes with the FastAPI application.
"""
import logging

logger = logging.getLogger("madking.modules")


def register_all(app) -> None:
    """
    Registers all module routers with the application.

    Imports are performed lazily to avoid circular dependencies during startup.

    Args:
        app: The FastAPI application instance.
    """
    from . import catalog, character

    for router in catalog.routers:
        app.include_router(router)
    app.include_router(character.router)
    logger.info(f"Registered {len(catalog.routers) + 1} routers")
