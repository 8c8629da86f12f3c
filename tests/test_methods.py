import pytest

from evdb import methods


class TestMethodTable:
    def test_paths_and_names_unique(self):
        assert len(methods.METHODS) == len(methods._TABLE)
        assert len(methods.METHODS_BY_NAME) == len(methods._TABLE)

    def test_declarations(self):
        for method in methods._TABLE:
            assert method.path.startswith("/")
            assert method.http_method in ("GET", "POST")
            assert not set(method.required) & set(method.optional), method.path
            for group in method.exclusive:
                assert set(group) <= set(method.optional), method.path

    def test_covers_all_kinds(self):
        kinds = {m.path.split("/")[1] for m in methods._TABLE}
        assert {"events", "venues", "performers", "users", "calendars", "groups"} <= kinds

    def test_lookup(self):
        method = methods.lookup("events_properties_remove")
        assert method.path == "/events/properties/remove"
        assert method.exclusive == (("property_id", "name"),)
        assert methods.lookup("/events/get") is methods.lookup("events/get")
        assert methods.lookup("events_get").required == ("id",)

    def test_unknown(self):
        with pytest.raises(KeyError):
            methods.lookup("/events/explode")
