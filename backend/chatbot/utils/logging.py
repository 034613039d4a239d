import logging
import sys

# Third-party loggers that drown out message handling at INFO
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "twilio.http_client")


def setup_logging(level: str = "INFO") -> None:
    """Configure application-wide logging for the bot process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
