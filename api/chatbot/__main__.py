"""Run the API server: ``python -m chatbot``."""

import uvicorn

from chatbot.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "chatbot.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
