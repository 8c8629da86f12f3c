#!/usr/bin/env python
import logging
import os
from typing import Optional

from lxml.etree import _Element

from evdb import __version__
from evdb.lib.python_utilities import str2bool

debug_dump_communication = False
try:
    ## Environmental variables prepended with "EVDB_COMMDUMP" or
    ## "EVDB_DEBUGMODE" are used for debug purposes, the other "EVDB_"
    ## variables are connection parameters
    debug_dump_communication = bool(str2bool(os.environ.get("EVDB_COMMDUMP", "")))
    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["EVDB_DEBUGMODE"]
except KeyError:
    if "dev" in __version__:
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("evdb")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons):
    from evdb.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error("Deviation from expectations found.", exc_info=True)
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


class EVDBError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class APIError(EVDBError):
    """
    The server answered with an ``<error>`` document.  ``code`` is the
    short error string given in the ``string`` attribute (i.e.
    "Authentication Error" or "Not found"), ``description`` is the text
    of the ``<description>`` child.
    """

    code: str = ""
    description: str = ""

    def __init__(
        self,
        url: Optional[str] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        self.code = code or ""
        self.description = description or ""
        reason = self.code
        if self.description:
            reason = "%s: %s" % (self.code, self.description)
        super().__init__(url=url, reason=reason)


class AuthorizationError(EVDBError):
    """
    The client encountered an HTTP 401 or 403 error, or was set up
    without an application key.  The url property will contain the url
    in question, the reason property will contain the excuse the server
    sent.
    """

    pass


class NotFoundError(EVDBError):
    """
    An element expected in a response document was not there.
    """

    pass


class ResponseError(EVDBError):
    pass


class MissingParameterError(EVDBError, ValueError):
    """
    A method was called without the parameters it needs.  Raised before
    anything is sent to the server.
    """

    pass


def check_error(root: _Element, url: Optional[str] = None) -> _Element:
    """Raises an APIError if the document is an error report, returns
    the document unchanged otherwise.
    """
    if root.tag != "error":
        return root
    from evdb.lib.xmlpath import read_path

    try:
        description = read_path(root, "error", "description")
    except NotFoundError:
        description = ""
    raise APIError(url=url, code=root.get("string"), description=description)
