#!/usr/bin/env python3
"""
Script to run the Product Catalog API server.
"""

import uvicorn

from product_api.config import config
from utilities.logger import get_logger, setup_logging


def main():
    """Run the API server. Exits non-zero if the store cannot be reached at startup."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )

    logger = get_logger(__name__)
    logger.info(
        "Starting Product Catalog API server",
        host=config.host,
        port=config.port,
        debug=config.debug,
        database=config.mongodb_database,
        collection=config.mongodb_collection,
        auth_enabled=config.auth_enabled
    )

    uvicorn.run(
        "product_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        lifespan="on",
        access_log=True
    )


if __name__ == "__main__":
    main()
