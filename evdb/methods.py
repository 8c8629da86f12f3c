"""
The EVDB API endpoints.

Every remote method is described by one ``Method`` record: the path,
the parameters that must always be given, the optional parameters,
and the HTTP method to use.  ``EVDBClient.call`` takes a record from
``METHODS`` and turns the keyword arguments into a request.

``exclusive`` lists groups of optional parameters where at least one
member of the group has to be given, i.e. a property is removed
either by its ``property_id`` or by its ``name``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
from typing import Tuple


@dataclass(frozen=True)
class Method:
    path: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()
    http_method: str = "GET"
    exclusive: Tuple[Tuple[str, ...], ...] = ()
    doc: str = ""

    @property
    def name(self) -> str:
        """``/events/tags/new`` is known as ``events_tags_new``"""
        return self.path.strip("/").replace("/", "_")

    @property
    def parameters(self) -> Tuple[str, ...]:
        return self.required + self.optional


_SEARCH_PAGING = ("page_size", "page_number", "count_only")
_EVENT_FIELDS = (
    "title",
    "start_time",
    "stop_time",
    "tz_olson_path",
    "all_day",
    "description",
    "privacy",
    "tags",
    "free",
    "price",
    "venue_id",
    "parent_id",
)
_EVENT_SEARCH = (
    "keywords",
    "location",
    "date",
    "category",
    "within",
    "units",
    "sort_order",
    "sort_direction",
    "image_sizes",
    "languages",
    "mature",
    "include",
)
_VENUE_FIELDS = (
    "name",
    "address",
    "city",
    "region",
    "postal_code",
    "country",
    "description",
    "privacy",
    "venue_type",
    "url",
    "url_type",
    "parent_id",
)
_PERFORMER_FIELDS = ("name", "short_bio", "long_bio", "tags")
_CALENDAR_FIELDS = (
    "calendar_name",
    "description",
    "tags",
    "privacy",
    "what_query",
    "where_query",
    "notify_schedule",
)
_GROUP_FIELDS = ("name", "description", "tags", "privacy", "allow_post_by_all")


def _annotations(kind: str) -> Tuple[Method, ...]:
    """
    Events, venues and performers share the same set of sub-methods
    for tags, comments, links, images and properties.
    """
    noun = kind[:-1]
    return (
        Method(f"/{kind}/tags/list", ("id",), doc=f"List the tags of a {noun}."),
        Method(f"/{kind}/tags/new", ("id", "tags"), doc=f"Tag a {noun}."),
        Method(
            f"/{kind}/tags/remove", ("id", "tags"), doc=f"Remove tags from a {noun}."
        ),
        Method(
            f"/{kind}/comments/new",
            ("id", "comment"),
            http_method="POST",
            doc=f"Add a comment to a {noun}.",
        ),
        Method(
            f"/{kind}/comments/modify",
            ("comment_id", "comment"),
            http_method="POST",
            doc="Change the text of a comment.",
        ),
        Method(
            f"/{kind}/comments/delete", ("comment_id",), doc="Delete a comment."
        ),
        Method(
            f"/{kind}/links/new",
            ("id", "link", "link_type_id"),
            ("description",),
            doc=f"Add a link to a {noun}.",
        ),
        Method(
            f"/{kind}/links/delete", ("id", "link_id"), doc=f"Remove a {noun} link."
        ),
        Method(
            f"/{kind}/images/add",
            ("id", "image_id"),
            doc=f"Attach an uploaded image to a {noun}.",
        ),
        Method(
            f"/{kind}/images/remove",
            ("id", "image_id"),
            doc=f"Detach an image from a {noun}.",
        ),
        Method(
            f"/{kind}/properties/add",
            ("id", "name", "value"),
            doc=f"Set a name/value property on a {noun}.",
        ),
        Method(
            f"/{kind}/properties/list",
            ("id",),
            doc=f"List the properties of a {noun}.",
        ),
        Method(
            f"/{kind}/properties/remove",
            ("id",),
            ("property_id", "name"),
            exclusive=(("property_id", "name"),),
            doc=f"Remove a {noun} property, given by property_id or by name.",
        ),
    )


_TABLE: Tuple[Method, ...] = (
    ## Events
    Method(
        "/events/new",
        ("title", "start_time"),
        _EVENT_FIELDS[2:],
        http_method="POST",
        doc="Add a new event record.",
    ),
    Method(
        "/events/get",
        ("id",),
        ("image_sizes",),
        doc="Get an event record, with its venue, performers and tags.",
    ),
    Method(
        "/events/modify",
        ("id",),
        _EVENT_FIELDS,
        http_method="POST",
        doc="Modify an event record.",
    ),
    Method("/events/withdraw", ("id",), ("note",), doc="Withdraw an event."),
    Method("/events/restore", ("id",), doc="Restore a withdrawn event."),
    Method(
        "/events/search",
        (),
        _EVENT_SEARCH + _SEARCH_PAGING,
        doc="Search for events.",
    ),
    Method("/events/reindex", ("id",), doc="Update the search index of an event."),
    Method(
        "/events/ical",
        (),
        _EVENT_SEARCH,
        doc="Search for events, results as an iCalendar feed.",
    ),
    Method(
        "/events/rss",
        (),
        _EVENT_SEARCH,
        doc="Search for events, results as an RSS feed.",
    ),
    Method(
        "/events/performers/add",
        ("id", "performer_id"),
        doc="Add a performer to an event.",
    ),
    Method(
        "/events/performers/remove",
        ("id", "performer_id"),
        doc="Remove a performer from an event.",
    ),
    Method(
        "/events/categories/add",
        ("id", "category_id"),
        doc="Put an event in a category.",
    ),
    Method(
        "/events/categories/remove",
        ("id", "category_id"),
        doc="Take an event out of a category.",
    ),
    Method("/events/going/list", ("id",), doc="List the users going to an event."),
    *_annotations("events"),
    ## Venues
    Method(
        "/venues/new",
        ("name",),
        _VENUE_FIELDS[1:],
        http_method="POST",
        doc="Add a new venue record.",
    ),
    Method("/venues/get", ("id",), ("image_sizes",), doc="Get a venue record."),
    Method(
        "/venues/modify",
        ("id",),
        _VENUE_FIELDS,
        http_method="POST",
        doc="Modify a venue record.",
    ),
    Method("/venues/withdraw", ("id",), ("note",), doc="Withdraw a venue."),
    Method("/venues/restore", ("id",), doc="Restore a withdrawn venue."),
    Method(
        "/venues/search",
        (),
        ("keywords", "location", "within", "units", "sort_order", "sort_direction")
        + _SEARCH_PAGING,
        doc="Search for venues.",
    ),
    Method(
        "/venues/resolve",
        ("location",),
        doc="Resolve a free form location into matching venues.",
    ),
    *_annotations("venues"),
    ## Performers
    Method(
        "/performers/new",
        ("name", "short_bio"),
        ("long_bio", "tags"),
        http_method="POST",
        doc="Add a new performer record.",
    ),
    Method(
        "/performers/get",
        ("id",),
        ("show_events", "image_sizes"),
        doc="Get a performer record.",
    ),
    Method(
        "/performers/modify",
        ("id",),
        _PERFORMER_FIELDS,
        http_method="POST",
        doc="Modify a performer record.",
    ),
    Method("/performers/withdraw", ("id",), ("note",), doc="Withdraw a performer."),
    Method("/performers/restore", ("id",), doc="Restore a withdrawn performer."),
    Method(
        "/performers/search",
        (),
        ("keywords", "sort_order") + _SEARCH_PAGING,
        doc="Search for performers.",
    ),
    Method(
        "/performers/events/list",
        ("id",),
        ("show_past_events",),
        doc="List the events of a performer.",
    ),
    Method(
        "/performers/demands/list",
        ("id",),
        doc="List the demands for a performer.",
    ),
    *_annotations("performers"),
    ## Users
    Method("/users/get", ("id",), doc="Get a user record."),
    Method(
        "/users/search",
        (),
        ("keywords", "location") + _SEARCH_PAGING,
        doc="Search for users.",
    ),
    Method("/users/venues/list", ("id",), doc="List the venues a user added."),
    Method("/users/events/recent", ("id",), doc="List the events a user added."),
    Method("/users/groups/list", (), doc="List the groups of the logged in user."),
    Method("/users/calendars/list", ("id",), doc="List the calendars of a user."),
    Method(
        "/users/calendars/get",
        ("id",),
        doc="Get a calendar of the logged in user, including its events.",
    ),
    Method("/users/going/list", ("id",), doc="List the events a user is going to."),
    Method(
        "/users/going/add",
        ("id",),
        doc="Mark the logged in user as going to an event.",
    ),
    Method(
        "/users/going/remove",
        ("id",),
        doc="Mark the logged in user as no longer going to an event.",
    ),
    Method("/users/locales/list", (), doc="List the locations of the logged in user."),
    Method(
        "/users/locales/add", ("location",), doc="Add a location to the logged in user."
    ),
    Method(
        "/users/locales/delete",
        ("location",),
        doc="Remove a location from the logged in user.",
    ),
    Method(
        "/users/performers/list",
        ("id",),
        doc="List the performers a user is tracking.",
    ),
    ## Calendars
    Method(
        "/calendars/new",
        ("calendar_name",),
        _CALENDAR_FIELDS[1:],
        http_method="POST",
        doc="Create a new calendar.",
    ),
    Method("/calendars/get", ("id",), doc="Get a calendar record."),
    Method(
        "/calendars/modify",
        ("id",),
        _CALENDAR_FIELDS,
        http_method="POST",
        doc="Modify a calendar.",
    ),
    Method("/calendars/delete", ("id",), doc="Delete a calendar."),
    Method(
        "/calendars/search",
        (),
        ("keywords",) + _SEARCH_PAGING,
        doc="Search for calendars.",
    ),
    Method(
        "/calendars/latest/stickers",
        (),
        ("page_size",),
        doc="List the most recently stickered events.",
    ),
    Method(
        "/calendars/latest/created",
        (),
        ("page_size",),
        doc="List the most recently created calendars.",
    ),
    Method("/calendars/tags/cloud", (), ("id",), doc="Get a tag cloud of calendars."),
    Method(
        "/calendars/events/add",
        ("id", "event_id"),
        ("note",),
        doc="Add an event to a calendar.",
    ),
    Method(
        "/calendars/events/remove",
        ("id", "event_id"),
        doc="Remove an event from a calendar.",
    ),
    Method(
        "/calendars/events/list",
        ("id",),
        ("page_size", "page_number"),
        doc="List the events of a calendar.",
    ),
    ## Groups
    Method(
        "/groups/new",
        ("name",),
        _GROUP_FIELDS[1:],
        http_method="POST",
        doc="Create a new group.",
    ),
    Method("/groups/get", ("id",), doc="Get a group record."),
    Method(
        "/groups/modify",
        ("id",),
        _GROUP_FIELDS,
        http_method="POST",
        doc="Modify a group.",
    ),
    Method("/groups/delete", ("id",), doc="Delete a group."),
    Method(
        "/groups/search",
        (),
        ("keywords",) + _SEARCH_PAGING,
        doc="Search for groups.",
    ),
    Method("/groups/users/list", ("id",), doc="List the members of a group."),
    Method("/groups/users/add", ("id", "user_id"), doc="Add a member to a group."),
    Method(
        "/groups/users/remove",
        ("id", "user_id"),
        doc="Remove a member from a group.",
    ),
    Method(
        "/groups/events/list",
        ("id",),
        ("page_size", "page_number"),
        doc="List the events of a group.",
    ),
    Method(
        "/groups/events/add",
        ("id", "event_id"),
        doc="Add an event to a group.",
    ),
    Method(
        "/groups/events/remove",
        ("id", "event_id"),
        doc="Remove an event from a group.",
    ),
    ## Categories and demands
    Method("/categories/list", (), ("subcategories",), doc="List the categories."),
    Method("/demands/get", ("id",), doc="Get a demand record."),
    Method(
        "/demands/search",
        (),
        ("keywords", "location", "sort_order") + _SEARCH_PAGING,
        doc="Search for demands.",
    ),
    Method("/demands/members/list", ("id",), doc="List the members of a demand."),
)

METHODS: Dict[str, Method] = {m.path: m for m in _TABLE}
METHODS_BY_NAME: Dict[str, Method] = {m.name: m for m in _TABLE}


def lookup(name: str) -> Method:
    """
    Finds a method either by path (``/events/get``, the leading slash
    may be omitted) or by name (``events_get``).  Raises KeyError for
    unknown methods.
    """
    if name in METHODS_BY_NAME:
        return METHODS_BY_NAME[name]
    path = "/" + name.lstrip("/")
    if path in METHODS:
        return METHODS[path]
    raise KeyError(f"unknown EVDB method {name!r}")
