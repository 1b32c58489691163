"""Run the webhook server: ``python -m ghdefaults``."""

import uvicorn

from ghdefaults.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "ghdefaults.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
