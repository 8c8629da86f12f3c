#!/usr/bin/env python
import hashlib
import logging
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any
from typing import Optional
from typing import Tuple
from typing import Union

import requests
from icalendar import Calendar
from lxml.etree import _Element
from requests.structures import CaseInsensitiveDict

from evdb import __version__
from evdb import methods
from evdb.lib import error
from evdb.lib.params import encode_params
from evdb.lib.params import Params
from evdb.lib.params import param_items
from evdb.lib.python_utilities import to_wire
from evdb.lib.xmlpath import find_path
from evdb.response import EVDBResponse

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

"""
The ``EVDBClient`` class handles the communication with the EVDB REST
API: the login handshake, building the requests, and turning the
replies into lxml element trees.  Every remote method goes through
``EVDBClient.invoke``; ``EVDBClient.call`` adds the parameter checks
from the method table in ``evdb.methods``.

``get_evdbclient`` will return an EVDBClient object, based either on
the parameters given, environmental variables or a configuration file.
"""

log = logging.getLogger("evdb")

DEFAULT_URL = "https://api.evdb.com/rest"


@dataclass
class Session:
    """The login state of a client.  ``user_key`` is only set after a
    successful login."""

    username: Optional[str] = None
    user_key: Optional[str] = None

    def __bool__(self) -> bool:
        return self.user_key is not None


@dataclass(frozen=True)
class EVDBRequest:
    """One request to the API, ready to be sent."""

    path: str
    params: Tuple[Tuple[str, Any], ...] = ()
    method: str = "GET"
    check_errors: bool = True

    @property
    def query_string(self) -> str:
        return encode_params(self.params)

    def url(self, base: str) -> str:
        url = base.rstrip("/") + "/" + self.path.lstrip("/")
        query = self.query_string
        if query:
            url += "?" + query
        return url


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def login_response(nonce: str, password: str) -> str:
    """The digest sent instead of the password when logging in"""
    return md5_hex(nonce + ":" + md5_hex(password))


class EVDBClient:
    """
    Basic client for the EVDB API, uses the requests lib.

    Unless you have special needs, you should probably care most about
    the constructor (__init__), login and call.
    """

    url: str = DEFAULT_URL
    proxy: Optional[str] = None
    huge_tree: bool = False

    def __init__(
        self,
        app_key: Optional[str] = None,
        url: str = DEFAULT_URL,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = 30,
        proxy: Optional[str] = None,
        ssl_verify_cert: Union[bool, str] = True,
        headers: Optional[Mapping[str, str]] = None,
        huge_tree: bool = False,
        dump_communication: Optional[bool] = None,
    ) -> None:
        """
        Sets up a requests session towards the API.

        Args:
          app_key: The application key, sent with every request.
          url: Base URL of the REST API.
          username, password: if both are given, login() is done right away.
          timeout and ssl_verify_cert are passed to requests.request.
          ssl_verify_cert can be the path of a CA-bundle or False.
          proxy: A string defining a proxy server: `scheme://hostname:port`
          huge_tree: boolean, enable XMLParser huge_tree to handle big
            documents, beware of security issues, see
            https://lxml.de/api/lxml.etree.XMLParser-class.html
          dump_communication: write all requests and responses to
            temporary files.  Defaults to the EVDB_COMMDUMP variable.
        """
        self.app_key = app_key
        self.url = url
        self.timeout = timeout
        self.proxy = proxy
        self.ssl_verify_cert = ssl_verify_cert
        self.huge_tree = huge_tree
        if dump_communication is None:
            dump_communication = error.debug_dump_communication
        self.dump_communication = dump_communication
        self.session = Session()
        self._session_lock = threading.Lock()

        self.http = requests.Session()
        self.headers = CaseInsensitiveDict(
            {
                "User-Agent": "python-evdb/" + __version__,
                "Accept": "text/xml, application/xml, text/calendar",
            }
        )
        self.headers.update(headers or {})
        log.debug("url: " + str(url))

        if username and password:
            self.login(username, password)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[BaseException] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """
        Closes the requests session object
        """
        self.http.close()

    ## Transport

    def request(self, request: EVDBRequest) -> EVDBResponse:
        """
        Actually sends the request.  The connection is released when
        this method returns, also when an exception is raised.
        """
        url = request.url(self.url)
        proxies = None
        if self.proxy is not None:
            proxies = {url.split(":", 1)[0]: self.proxy}

        log.debug(
            "sending request - method={0}, path={1}".format(request.method, request.path)
        )

        with self.http.request(
            request.method,
            url,
            headers=self.headers,
            proxies=proxies,
            timeout=self.timeout,
            verify=self.ssl_verify_cert,
        ) as r:
            log.debug("server responded with %i %s" % (r.status_code, r.reason))
            if self.dump_communication:
                self._dump_communication(request, r)
            if r.status_code in (
                requests.codes.forbidden,
                requests.codes.unauthorized,
            ):
                raise error.AuthorizationError(url=request.path, reason=r.reason)
            response = EVDBResponse(r, url=request.path, huge_tree=self.huge_tree)

        if response.status >= 400 and response.tree is None:
            raise error.ResponseError(
                url=request.path, reason=f"{response.status} {response.reason}"
            )
        if request.check_errors and response.tree is not None:
            response.check_error()
        return response

    def _dump_communication(self, request: EVDBRequest, r: Any) -> None:
        """Writes the request and the raw response to a file that is kept
        for later inspection"""
        import datetime
        from tempfile import NamedTemporaryFile

        with NamedTemporaryFile(prefix="evdbcomm", delete=False) as commlog:
            commlog.write(b"=" * 80 + b"\n")
            commlog.write(f"{datetime.datetime.now():%FT%H:%M:%S}".encode("utf-8"))
            commlog.write(b"\n====>\n")
            ## login digests and user keys stay out of the dump
            commlog.write(f"{request.method} {request.path}\n".encode("utf-8"))
            commlog.write(
                b"\n".join(
                    to_wire(f"{k}: {v}")
                    for (k, v) in request.params
                    if k not in ("response", "user_key")
                )
            )
            commlog.write(b"\n<====\n")
            commlog.write(f"{r.status_code} {r.reason}\n".encode("utf-8"))
            commlog.write(
                b"\n".join(to_wire(f"{x}: {r.headers[x]}") for x in r.headers)
            )
            commlog.write(b"\n\n")
            commlog.write(r.content or b"")
            commlog.write(b"\n")
            log.debug("communication dumped to %s", commlog.name)

    ## Method invocation

    def build_request(
        self,
        path: str,
        params: Optional[Params] = None,
        method: str = "GET",
        check_errors: bool = True,
        authenticated: bool = True,
    ) -> EVDBRequest:
        """
        Assembles the request: the app key first, then the session
        credentials (if logged in and ``authenticated`` is set), then
        the parameters given.
        """
        if not self.app_key:
            raise error.AuthorizationError(url=path, reason="no app_key configured")
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"unsupported HTTP method {method!r}")
        all_params = [("app_key", self.app_key)]
        if authenticated:
            with self._session_lock:
                session = self.session
            if session:
                all_params.append(("user", session.username))
                all_params.append(("user_key", session.user_key))
        all_params.extend(param_items(params))
        return EVDBRequest(
            path="/" + path.lstrip("/"),
            params=tuple(all_params),
            method=method,
            check_errors=check_errors,
        )

    def invoke(
        self,
        path: str,
        params: Optional[Params] = None,
        method: str = "GET",
        check_errors: bool = True,
    ) -> _Element:
        """
        Calls a remote method and returns the parsed response document.

        Args:
            path: The method, i.e. ``/events/get``
            params: the method parameters, a dict or a list of pairs
            method: ``GET`` or ``POST``
            check_errors: raise APIError if the server answers with an
              ``<error>`` document

        Returns:
            The root element of the response
        """
        return self._document(self.build_request(path, params, method, check_errors))

    def call(self, method_name: str, /, **kwargs: Any) -> _Element:
        """
        Calls one of the methods listed in ``evdb.methods``, with the
        method parameters given as keyword arguments:

            client.call("events_get", id="E0-001-000278174-6")
            client.call("/venues/search", keywords="jazz", location="Oslo")

        Required parameters must be given.  Optional parameters are only
        sent when given a value; None, empty strings and empty lists
        count as not given.  The method name is positional only, since
        ``name`` is a parameter of several methods:

            client.call("venues_new", name="Blue Note")
        """
        return self._document(self._method_request(method_name, kwargs))

    def _document(self, request: EVDBRequest) -> _Element:
        response = self.request(request)
        if response.tree is None:
            raise error.ResponseError(
                url=request.path, reason="no XML document delivered"
            )
        return response.tree

    def _method_request(
        self, method_name: str, kwargs: Mapping[str, Any]
    ) -> EVDBRequest:
        method = methods.lookup(method_name)
        unknown = set(kwargs) - set(method.parameters)
        if unknown:
            raise TypeError(
                f"{method.path} got unexpected parameters: {', '.join(sorted(unknown))}"
            )
        params = []
        for param in method.required:
            if kwargs.get(param) is None:
                raise error.MissingParameterError(
                    url=method.path, reason=f"required parameter {param!r} missing"
                )
            params.append((param, kwargs[param]))
        for group in method.exclusive:
            if not any(_given(kwargs.get(param)) for param in group):
                raise error.MissingParameterError(
                    url=method.path,
                    reason=f"one of {', '.join(group)} must be given",
                )
        for param in method.optional:
            if _given(kwargs.get(param)):
                params.append((param, kwargs[param]))
        return self.build_request(method.path, params, method.http_method)

    def get_ical(
        self, path: str = "/events/ical", /, **kwargs: Any
    ) -> Calendar:
        """
        Fetches an iCalendar feed (by default an event search) and
        returns it as an icalendar.Calendar object.
        """
        request = self._method_request(path, kwargs)
        response = self.request(request)
        if response.tree is not None:
            ## the server sends XML on errors
            response.check_error()
            raise error.ResponseError(
                url=request.path, reason="expected an iCalendar feed, got XML"
            )
        return Calendar.from_ical(response.raw)

    ## Authentication

    def login(self, username: str, password: str) -> str:
        """
        Logs in.  A nonce is fetched from the server, and the password
        digest is sent together with the nonce.  The password itself
        is never sent.  On success the user key is stored in
        self.session and sent with all later requests.  If anything
        fails, the session is left as it was.

        Returns the user key.
        """
        log.debug("logging in as %s", username)
        nonce_request = self.build_request(
            "/users/login",
            [("user", username)],
            check_errors=False,
            authenticated=False,
        )
        nonce_response = self.request(nonce_request)
        nonce = _optional_child_text(nonce_response.tree, "nonce")
        if nonce is None:
            ## No nonce, then it's probably a proper error report
            nonce_response.check_error()
            raise error.NotFoundError(
                url=nonce_request.path, reason="no nonce in login response"
            )

        login_request = self.build_request(
            "/users/login",
            [
                ("user", username),
                ("nonce", nonce),
                ("response", login_response(nonce, password)),
            ],
            authenticated=False,
        )
        tree = self.request(login_request).check_error()
        user_key = _optional_child_text(tree, "user_key")
        if user_key is None:
            raise error.NotFoundError(
                url=login_request.path, reason="no user_key in login response"
            )

        with self._session_lock:
            self.session = Session(username=username, user_key=user_key)
        log.info("logged in as %s", username)
        return user_key

    def logout(self) -> None:
        """Forgets the user key.  Later requests are unauthenticated."""
        with self._session_lock:
            self.session = Session()


def _given(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, bytes, list, tuple)) and len(value) == 0:
        return False
    return True


def _optional_child_text(tree: Optional[_Element], tag: str) -> Optional[str]:
    """
    Text of the root element if it has the given tag, or of a direct
    child of the root having the tag.  None if neither is found.
    """
    if tree is None:
        return None
    try:
        if tree.tag == tag:
            node = tree
        else:
            node = find_path(tree, tree.tag, tag)
    except error.NotFoundError:
        return None
    error.assert_(len(node) == 0)
    return "".join(node.itertext()).strip() or None


def get_evdbclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional["EVDBClient"]:
    """
    This function will yield an EVDBClient object.  It will read
    configuration from various sources, dependent on the parameters
    given, in this order:

    * Data from the parameters given
    * Environment variables prepended with `EVDB_`, like `EVDB_APP_KEY`, `EVDB_USERNAME`, `EVDB_PASSWORD`.
    * Environment variables `EVDB_CONFIG_FILE` and `EVDB_CONFIG_SECTION` will be honored if environment is set
    * Configuration file, see evdb.config

    If a username and password is found, the client will be logged in.
    Returns None if no configuration was found.
    """
    from . import config

    conn_params = config.get_connection_params(
        check_config_file=check_config_file,
        config_file=config_file,
        config_section_name=config_section,
        environment=environment,
        **config_data,
    )
    if conn_params is None:
        return None
    unknown = set(conn_params) - config.CONNKEYS
    if unknown:
        error.weirdness(f"ignoring unknown connection parameters {unknown}")
    return EVDBClient(**{k: v for k, v in conn_params.items() if k in config.CONNKEYS})
