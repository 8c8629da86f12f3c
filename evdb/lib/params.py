"""
Query string encoding for EVDB requests.

The API takes all its arguments as URL query parameters.  The order
of the parameters is kept as given, so that the same call always
yields the same URL.
"""

from __future__ import annotations

import datetime
import decimal
import enum
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Union
from urllib.parse import quote_plus

from evdb.lib.error import MissingParameterError

Params = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def param_items(params: Params | None) -> list[tuple[str, Any]]:
    """Returns the parameters as a list of (name, value) pairs, in order."""
    if params is None:
        return []
    if isinstance(params, Mapping):
        return list(params.items())
    return [(name, value) for name, value in params]


def param_value(value: Any) -> str:
    """
    Renders one parameter value as text.

    >>> param_value(3)
    '3'
    >>> param_value(1e20)
    '100000000000000000000'
    >>> param_value(datetime.datetime(2024, 5, 1, 20, 0))
    '2024-05-01 20:00:00'
    """
    if value is None:
        raise MissingParameterError(reason="parameter value is None")
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, enum.Enum):
        if isinstance(value.value, str):
            return value.value
        return value.name.lower()
    ## bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        ## repr(1e20) is "1e+20", the API wants plain decimals
        value = decimal.Decimal(repr(value))
    if isinstance(value, decimal.Decimal):
        return format(value, "f")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, datetime.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, datetime.date):
        return value.isoformat()
    ## lists of ids are given comma separated
    if isinstance(value, (list, tuple)):
        return ",".join(param_value(x) for x in value)
    return str(value)


def encode_params(params: Params | None) -> str:
    """
    Encodes the parameters into a query string.

    >>> encode_params({"foo": 1, "bar": "baz quux"})
    'foo=1&bar=baz+quux'
    """
    pairs = []
    for name, value in param_items(params):
        try:
            text = param_value(value)
        except MissingParameterError:
            raise MissingParameterError(
                reason=f"no value given for parameter {name!r}"
            ) from None
        pairs.append(f"{quote_plus(str(name))}={quote_plus(text)}")
    return "&".join(pairs)
