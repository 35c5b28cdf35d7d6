"""Application entry point: run the Questify development backend."""

from __future__ import annotations

from questify.config import ClientSettings
from questify.constants.about import APP_NAME, APP_VERSION
from questify.server.dev_server import API_PREFIX, start_api_server
from questify.server.dev_store import DevStore, seed_demo_data
from questify.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, seed demo data and serve the development API."""
    settings = ClientSettings.from_env()
    logger = configure_logging(settings.log_level)
    logger.info("Starting %s %s development backend", APP_NAME, APP_VERSION)

    store = DevStore()
    seeded = seed_demo_data(store)
    logger.info("Seeded demo class %s with assignment %s", seeded["class"], seeded["assignment"])
    logger.info("Demo logins: admin@questify.dev / admin123, alice@questify.dev / student123")

    server_thread = start_api_server(store, host=settings.host, port=settings.port)
    logger.info("Point QUESTIFY_API_URL at http://%s:%d%s", settings.host, settings.port, API_PREFIX)
    try:
        server_thread.join()
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
