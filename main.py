"""Recipe Carbon API server"""

import uvicorn
from config.settings import configure_logging, get_settings


def main():
    settings = get_settings()
    # The reload worker configures logging again in the app lifespan
    configure_logging(settings)
    uvicorn.run(
        "src.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        reload=True,
    )


if __name__ == "__main__":
    main()
