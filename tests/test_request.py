"""
Tests for request records: immutable builders and form rendering.
"""

from dataclasses import FrozenInstanceError

import pytest

from gjcodec.config import ServerConfig
from gjcodec.request import (
    GD_21,
    GD_22,
    BaseRequest,
    LevelRequest,
    UserRequest,
    UserSearchRequest,
)


CONFIG = ServerConfig(base_url="https://gdps.example/db/")


class TestBaseRequest:
    """Base data sent with every request."""

    def test_default_is_gd_22(self):
        assert BaseRequest() == GD_22

    def test_gd_21(self):
        assert GD_21.game_version == 21
        assert GD_21.binary_version == 33
        assert GD_21.secret == GD_22.secret


class TestUserRequest:
    """Profile downloads by account id."""

    def test_form(self):
        request = UserRequest(user=123)
        assert request.to_form() == [
            ("gameVersion", "22"),
            ("binaryVersion", "38"),
            ("secret", "Wmfd2893gb7"),
            ("targetAccountID", "123"),
        ]

    def test_str_is_url_encoded_form(self):
        assert str(UserRequest(user=123)) == (
            "gameVersion=22&binaryVersion=38&secret=Wmfd2893gb7&targetAccountID=123"
        )

    def test_url(self):
        assert UserRequest(user=1).to_url(CONFIG) == "https://gdps.example/db/getGJUserInfo20.php"

    def test_with_user_returns_new_value(self):
        request = UserRequest(user=1)
        changed = request.with_user(2)
        assert changed.user == 2
        assert request.user == 1

    def test_with_base(self):
        assert str(UserRequest(user=1).with_base(GD_21)).startswith("gameVersion=21&binaryVersion=33")

    def test_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            UserRequest(user=1).user = 2


class TestUserSearchRequest:
    """User search by exact name."""

    def test_form(self):
        request = UserSearchRequest(search_string="Some Name")
        assert request.to_form()[-3:] == [("total", "0"), ("page", "0"), ("str", "Some Name")]

    def test_str_encodes_search_string(self):
        assert str(UserSearchRequest(search_string="a b&c")).endswith("&str=a+b%26c")

    def test_builders(self):
        request = UserSearchRequest(search_string="x").with_page(3).with_total(10).with_search_string("y")
        assert (request.page, request.total, request.search_string) == (3, 10, "y")

    def test_url(self):
        assert UserSearchRequest(search_string="x").to_url(CONFIG).endswith("getGJUsers20.php")


class TestLevelRequest:
    """Level downloads."""

    def test_booleans_render_as_digits(self):
        form = dict(LevelRequest(level_id=128).to_form())
        assert form["levelID"] == "128"
        assert form["inc"] == "1"
        assert form["extra"] == "0"

    def test_builders(self):
        request = LevelRequest(level_id=1).with_level_id(2).with_inc(False).with_extra(True)
        form = dict(request.to_form())
        assert (form["levelID"], form["inc"], form["extra"]) == ("2", "0", "1")

    def test_url(self):
        assert LevelRequest(level_id=1).to_url(CONFIG) == "https://gdps.example/db/downloadGJLevel22.php"
