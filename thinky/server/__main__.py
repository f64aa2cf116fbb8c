"""Run the Thinky server with uvicorn: ``python -m thinky.server``."""

import uvicorn

from thinky.server.core.config import settings


def main() -> None:
    uvicorn.run(
        "thinky.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
