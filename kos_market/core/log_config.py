import logging

from kos_market.core.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or config.log_level).upper(),
        format=LOG_FORMAT,
    )
    # the engine echo flag already controls SQL output
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
