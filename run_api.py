#!/usr/bin/env python3
"""
Script to run the Books API server.
"""

import uvicorn
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from books_api.config import config
from utilities.logger import get_logger, setup_logging


def main():
    """Run the API server."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger = get_logger("run_api")
    logger.info(
        "Starting Books API server",
        host=config.host,
        port=config.port,
        base_path=config.base_path,
        debug=config.debug
    )

    uvicorn.run(
        "books_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
