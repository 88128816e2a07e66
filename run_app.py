#!/usr/bin/env python3
"""
Storefront API runner

Usage:
    python run_app.py                    # Run on HOST:PORT from settings
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
    python run_app.py --reload           # Development mode with auto-reload
"""

import argparse
import sys

import uvicorn

from storefront.core.config import get_settings

def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Storefront API runner")
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload"
    )
    args = parser.parse_args()
    
    uvicorn.run(
        "storefront.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload or settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
    return 0

if __name__ == "__main__":
    sys.exit(main())
