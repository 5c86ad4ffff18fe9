"""Entrypoint for launching the SketchPlot FastAPI server."""
from __future__ import annotations

import logging

import uvicorn


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("sketchplot.server.app:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
