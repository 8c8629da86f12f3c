"""
Response parsing for EVDB requests.

``EVDBResponse`` takes a requests response, reads the body and parses
it into ``self.tree``.  End users of the library typically only see
the tree; the response object is available through
``EVDBClient.request``.
"""

import logging
from typing import Any
from typing import Optional

from lxml import etree
from lxml.etree import _Element

from evdb.lib import error
from evdb.lib.python_utilities import to_normal_str
from evdb.lib.xmlpath import element_to_dict
from evdb.lib.xmlpath import read_path

log = logging.getLogger("evdb")


class EVDBResponse:
    """
    This class is a response from an EVDB request.  It is instantiated
    from the EVDBClient class.  Since the API delivers XML, it tries to
    parse the body into `self.tree`.  Bodies that are declared as
    something else than XML (the iCalendar feeds) are kept in
    `self.raw` only.
    """

    tree: Optional[_Element] = None
    reason: str = ""
    status: int = 0
    url: Optional[str] = None
    huge_tree: bool = False

    def __init__(
        self, response: Any, url: Optional[str] = None, huge_tree: bool = False
    ) -> None:
        self.headers = response.headers
        self.status = response.status_code
        self.url = url
        self.huge_tree = huge_tree
        log.debug("response headers: " + str(self.headers))
        log.debug("response status: " + str(self.status))

        self._raw = response.content
        ## responses without a reason have been observed
        self.reason = getattr(response, "reason", "") or ""

        content_type = self.headers.get("Content-Type", "")
        xml_types = ["text/xml", "application/xml", "application/rss+xml"]
        no_xml_types = [
            "text/plain",
            "text/calendar",
            "text/html",
            "application/octet-stream",
        ]
        expect_xml = any(content_type.startswith(x) for x in xml_types)
        expect_no_xml = any(content_type.startswith(x) for x in no_xml_types)
        if (
            content_type
            and not expect_xml
            and not expect_no_xml
            and self.status < 400
        ):
            error.weirdness(f"Unexpected content type: {content_type}")

        if not self._raw:
            self._raw = b""
            log.debug("No content delivered")
        elif expect_no_xml:
            log.debug("Non-XML content delivered: %s", content_type)
        else:
            ## The content type cannot always be trusted, so parsing is
            ## attempted unless the server explicitly said it is not XML.
            try:
                self.tree = etree.XML(
                    self._raw,
                    parser=etree.XMLParser(
                        remove_blank_text=True, huge_tree=self.huge_tree
                    ),
                )
            except etree.XMLSyntaxError:
                log.error(
                    "Expected some valid XML from the server, but got this: \n"
                    + str(self._raw),
                    exc_info=True,
                )
                if expect_xml or self.status < 400:
                    raise
            else:
                if log.isEnabledFor(logging.DEBUG):
                    log.debug(etree.tostring(self.tree, pretty_print=True))

    @property
    def raw(self) -> str:
        return to_normal_str(self._raw)

    def check_error(self) -> _Element:
        """
        Raises APIError if the server reported a fault, otherwise returns
        the tree.  Raises ResponseError if there is no document to check.
        """
        if self.tree is None:
            raise error.ResponseError(
                url=self.url,
                reason=f"{self.status} {self.reason}, no XML document delivered",
            )
        return error.check_error(self.tree, url=self.url)

    def find_text(self, *path: str) -> str:
        """Text found by following ``path`` from the document root."""
        if self.tree is None:
            raise error.NotFoundError(url=self.url, reason="empty response")
        return read_path(self.tree, *path)

    def to_dict(self) -> Any:
        """The document converted to plain python dicts, lists and strings."""
        if self.tree is None:
            return None
        return element_to_dict(self.tree)
