"""Main entry point for Support Desk."""

import os

import uvicorn
from dotenv import load_dotenv

from sim import Sim
from support_desk.api import create_fastapi_app
from support_desk.app import Application
from support_desk.config import PROJECT_ROOT
from support_desk.logging_config import setup_logging


def main():
    """Run the application."""
    load_dotenv(PROJECT_ROOT / ".env")
    setup_logging()

    # Get configuration from environment
    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))
    api_url = f"http://{api_host}:{api_port}"

    app = create_fastapi_app(
        application=Application(),
        sim=Sim(api_url=api_url),
    )

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_config=None,  # keep the JSON logging configured above
    )


if __name__ == "__main__":
    main()
