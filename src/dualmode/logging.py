import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

ROOT_KEY = "root"
PATH_KEY = "path"


def setup_logging(level: int | str = logging.WARNING, *, json_logs: bool = False) -> None:
    """
    Route dualmode's structlog events through the stdlib ``dualmode`` logger.

    Parameters
    ----------
    level : int | str, optional
        Level applied to the ``dualmode`` stdlib logger.
    json_logs : bool, optional
        Render events as JSON lines instead of console key/value output.
    """
    logging.getLogger(name="dualmode").setLevel(level=level)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def capability_context(path: str) -> Iterator[None]:
    """
    Bind the capability tree path being walked to every event in the block.

    ``path`` is rebound at each nesting level and restored on exit. ``root``
    is bound by the outermost call only, from the first path segment.
    """
    context = {PATH_KEY: path}
    if ROOT_KEY not in structlog.contextvars.get_contextvars():
        context[ROOT_KEY] = path.partition(".")[0]
    with structlog.contextvars.bound_contextvars(**context):
        yield
