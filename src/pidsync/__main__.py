"""
Main entry point for P&ID Sync.

Provides API server startup.
"""

import sys
import uvicorn

from pidsync.api import create_app
from pidsync.shared import get_settings


def main():
    """Main entry point."""
    if len(sys.argv) > 1 and sys.argv[1] == "serve":
        settings = get_settings()
        uvicorn.run(
            create_app(),
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower(),
        )
    else:
        print("P&ID Sync - P&ID editor core backed by a Neo4j plant graph")
        print("")
        print("Usage:")
        print("  python -m pidsync serve    # Start API server")
        print("")
        print("API Documentation:")
        print("  http://localhost:8000/docs    # Swagger UI")
        print("  http://localhost:8000/redoc   # ReDoc")


if __name__ == "__main__":
    main()
