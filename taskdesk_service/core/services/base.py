"""Common base for the pipeline's services."""

from __future__ import annotations

import logging

from taskdesk_service.infra.logging import get_lazy_logger


class BaseService:
    """Gives each service a logger named after its module and class.

    ``self.logger`` carries business events (reminder sent, digest generated)
    with structured ``extra``; ``self._lazy`` takes lambdas for debug lines
    built from query results.
    """

    def __init__(self) -> None:
        name = f"{type(self).__module__}.{type(self).__name__}"
        self.logger = logging.getLogger(name)
        self._lazy = get_lazy_logger(name)
