"""Entry point for running the FastAPI application with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("MANUALHUB_SERVER_PORT", "8080"))
  reload = os.getenv("UVICORN_RELOAD", "true").lower() == "true"
  uvicorn.run("manualhub.main:app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
  main()
