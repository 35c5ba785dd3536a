#!/usr/bin/env python
"""Script to run the TaskMate API server."""
import os
from pathlib import Path

import uvicorn

from taskmate.config import ENVIRONMENT, HOST, PORT

# Run from the repo root so the default sqlite file lands next to this script.
os.chdir(Path(__file__).resolve().parent)


def main():
    uvicorn.run(
        "taskmate.main:app",
        host=HOST,
        port=PORT,
        reload=ENVIRONMENT == "development",
    )


if __name__ == "__main__":
    main()
