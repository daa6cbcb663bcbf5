#!/usr/bin/env python3
"""
Run script for the Leafbase API.
This script launches the FastAPI server with the auth service mounted.
"""
import os
import sys
import traceback

import uvicorn

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    try:
        print(f"Starting Leafbase API server on http://{host}:{port}")
        print(f"API documentation at http://{host}:{port}/docs")

        uvicorn.run(
            "leafbase.main:app",
            host=host,
            port=port,
            reload=os.getenv("RELOAD", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
        )
    except Exception as e:
        print(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)
