#!/usr/bin/env python3
"""
Run script for the Clari backend
"""
import uvicorn

from clari.config.settings import settings
from clari.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
