"""Logger factory shared by the API modules."""

import logging

from uvicorn.logging import DefaultFormatter

FORMAT = "%(levelprefix)s %(asctime)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "mireb"


def get_logger(name: str = ROOT_LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """Return a logger writing through uvicorn's colored formatter.

    Handlers are attached once, on the ``mireb`` root logger; child loggers
    (``mireb.leads``, ``mireb.auth``...) propagate to it.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(DefaultFormatter(FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(level)
        root.propagate = False

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
