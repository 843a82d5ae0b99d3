import logging

LOGGER_NAME = "onboarding_api"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # repeated calls (app reloads, tests) must not stack handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)
    logger.propagate = True

    logger.debug("Logging configured at level %s", level)
    return logger
