import logging

import uvicorn

import config
from utils.config_validator import validate_or_exit
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

# Keep SQL loggers quiet; DB_ECHO=true still echoes statements
for logger_name in ['aiosqlite', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.WARNING)

logging.info("🔇 SQL loggers silenced (aiosqlite, sqlalchemy.*)")

validate_or_exit(config)

from app import create_app

app = create_app()


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)


if __name__ == '__main__':
    main()
