"""
Request records for the game server endpoints.

These are plain immutable value objects. Each `with_*` method returns a
new request with one field changed; nothing is ever mutated in place.

The field keys are the form parameter names the servers expect. Values
are rendered with the indexed format's scalar rules (booleans as 1/0,
floats without a trailing .0, ...), then URL-encoded by `str()`.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from gjcodec.config import ServerConfig, default_config
from gjcodec.schema import BOOL, STR, U8, U32, U64, nested, wire
from gjcodec.serde.indexed import to_pairs


GET_USER_ENDPOINT = "getGJUserInfo20.php"
SEARCH_USER_ENDPOINT = "getGJUsers20.php"
DOWNLOAD_LEVEL_ENDPOINT = "downloadGJLevel22.php"


@dataclass(frozen=True, kw_only=True)
class BaseRequest:
    """
    Data included in every request.

    Properties:
        game_version: Client version we pretend to be (22 for 2.2).
            The servers accept any value.
        binary_version: Internal client build (38 for 2.2).
            The servers accept any value.
        secret: Shared secret identifying valid clients. A wrong value
            makes the request fail.
    """

    game_version: int = wire("gameVersion", U8, default=22)
    binary_version: int = wire("binaryVersion", U8, default=38)
    secret: str = wire("secret", STR, default="Wmfd2893gb7")


GD_21 = BaseRequest(game_version=21, binary_version=33)
GD_22 = BaseRequest(game_version=22, binary_version=38)


class _Request:
    """Shared rendering for request records."""

    ENDPOINT = ""

    def to_url(self, config: Optional[ServerConfig] = None) -> str:
        return (config or default_config()).endpoint_url(self.ENDPOINT)

    def to_form(self) -> List[Tuple[str, str]]:
        """Ordered (parameter, value) pairs, base request fields first."""
        return to_pairs(self)

    def __str__(self) -> str:
        return urlencode(self.to_form())


@dataclass(frozen=True, kw_only=True)
class UserRequest(_Request):
    """
    Download a player profile by **account id** (not user id).

    The account id is sent as `targetAccountID`.
    """

    ENDPOINT = GET_USER_ENDPOINT

    base: BaseRequest = wire("base", nested(BaseRequest), default=GD_22)
    user: int = wire("targetAccountID", U64)

    def with_base(self, base: BaseRequest) -> "UserRequest":
        return replace(self, base=base)

    def with_user(self, user: int) -> "UserRequest":
        return replace(self, user=user)


@dataclass(frozen=True, kw_only=True)
class UserSearchRequest(_Request):
    """
    Search for a player by name.

    The servers only return the exact match, so `total` and `page` no
    longer do anything; they are still sent because the client sends them.
    """

    ENDPOINT = SEARCH_USER_ENDPOINT

    base: BaseRequest = wire("base", nested(BaseRequest), default=GD_22)
    total: int = wire("total", U32, default=0)
    page: int = wire("page", U32, default=0)
    search_string: str = wire("str", STR)

    def with_base(self, base: BaseRequest) -> "UserSearchRequest":
        return replace(self, base=base)

    def with_total(self, total: int) -> "UserSearchRequest":
        return replace(self, total=total)

    def with_page(self, page: int) -> "UserSearchRequest":
        return replace(self, page=page)

    def with_search_string(self, search_string: str) -> "UserSearchRequest":
        return replace(self, search_string=search_string)


@dataclass(frozen=True, kw_only=True)
class LevelRequest(_Request):
    """
    Download a single level, including its level data.

    Properties:
        inc: Whether the download counter should be incremented
        extra: Ask for extra data (unknown purpose, client sends it)
    """

    ENDPOINT = DOWNLOAD_LEVEL_ENDPOINT

    base: BaseRequest = wire("base", nested(BaseRequest), default=GD_22)
    level_id: int = wire("levelID", U64)
    inc: bool = wire("inc", BOOL, default=True)
    extra: bool = wire("extra", BOOL, default=False)

    def with_base(self, base: BaseRequest) -> "LevelRequest":
        return replace(self, base=base)

    def with_level_id(self, level_id: int) -> "LevelRequest":
        return replace(self, level_id=level_id)

    def with_inc(self, inc: bool) -> "LevelRequest":
        return replace(self, inc=inc)

    def with_extra(self, extra: bool) -> "LevelRequest":
        return replace(self, extra=extra)


__all__ = [
    "GET_USER_ENDPOINT",
    "SEARCH_USER_ENDPOINT",
    "DOWNLOAD_LEVEL_ENDPOINT",
    "BaseRequest",
    "GD_21",
    "GD_22",
    "UserRequest",
    "UserSearchRequest",
    "LevelRequest",
]
