"""Run the Contact Form API with uvicorn: ``python -m contact_api``."""

import uvicorn

from contact_api.config.settings import settings


def main() -> None:
    uvicorn.run(
        "contact_api.api.main:app",
        host=settings.API_HOST,
        port=settings.PORT,
        log_config=None,  # logging is configured by the application lifespan
    )


if __name__ == "__main__":
    main()
