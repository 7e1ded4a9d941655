"""Entrypoint: python -m groupchat"""
from __future__ import annotations

import uvicorn

from groupchat.config import settings


def main() -> None:
    uvicorn.run(
        "groupchat.app:create_app",
        factory=True,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        log_level="info",
    )


if __name__ == "__main__":
    main()
