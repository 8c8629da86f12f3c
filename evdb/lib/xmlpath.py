"""
Small helpers for digging values out of response documents.

A path is a sequence of tag names.  The first one names the document
root itself, the following ones name one child each, so for the
document ``<a><b>hello world</b></a>`` the path ``("a", "b")`` leads
to the text ``"hello world"``.
"""

from __future__ import annotations

from typing import Any

from lxml.etree import _Element

from evdb.lib.error import NotFoundError


def find_path(root: _Element, *path: str) -> _Element:
    """Returns the element at the end of ``path``, or raises
    NotFoundError if some step of the path does not exist.
    """
    if not path:
        return root
    if root.tag != path[0]:
        raise NotFoundError(
            reason=f"expected a <{path[0]}> document, got <{root.tag}>"
        )
    node = root
    for depth, tag in enumerate(path[1:], start=1):
        child = node.find(tag)
        if child is None:
            raise NotFoundError(
                reason=f"no <{tag}> found in /{'/'.join(path[:depth])}"
            )
        node = child
    return node


def element_text(element: _Element) -> str:
    """The text nodes directly below the element, joined with a space."""
    texts = [t.strip() for t in element.xpath("text()")]
    return " ".join(t for t in texts if t)


def read_path(root: _Element, *path: str) -> str:
    """Returns the text of the element at the end of ``path``."""
    return element_text(find_path(root, *path))


def element_to_dict(element: _Element) -> Any:
    """
    Converts an element into plain python values.

    Leaf elements without attributes become their text.  Anything else
    becomes a dict holding the attributes and one entry per child tag;
    a tag occurring more than once below the same parent becomes a list.
    Text mixed with child elements is kept under the ``"text"`` key.

    >>> element_to_dict(XML("<event id='E0'><title>Jazz</title></event>"))
    {'id': 'E0', 'title': 'Jazz'}
    """
    children = list(element)
    if not children and not element.attrib:
        return element_text(element)
    ret: dict[str, Any] = dict(element.attrib)
    for child in children:
        if not isinstance(child.tag, str):
            ## comments and processing instructions
            continue
        value = element_to_dict(child)
        if child.tag in ret:
            if not isinstance(ret[child.tag], list):
                ret[child.tag] = [ret[child.tag]]
            ret[child.tag].append(value)
        else:
            ret[child.tag] = value
    text = element_text(element)
    if text:
        ret["text"] = text
    return ret
