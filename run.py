#!/usr/bin/env python3
"""
Run script for the Trace API
"""
import uvicorn

from trace_api.config.settings import settings

if __name__ == "__main__":
    uvicorn.run(
        "trace_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
