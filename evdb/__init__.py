#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .evdbclient import EVDBClient
from .evdbclient import get_evdbclient
from .evdbclient import Session
from .response import EVDBResponse

## We should consider if the NullHandler-logic below is needed or not, and
## if there are better alternatives?
# Silence notification of no default logging handler
log = logging.getLogger("evdb")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "EVDBClient", "EVDBResponse", "Session", "get_evdbclient"]
