"""
Server entrypoint for the text-to-image form.

Architectural role:
- Configures logging and serves `imageform.api.http_api.create_app()` with uvicorn.

Environment:
- `HOST` (default `0.0.0.0`), `PORT` (default `8000`), `LOG_LEVEL` (default `INFO`).
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from imageform.api.http_api import create_app


def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
