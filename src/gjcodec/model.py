"""
Protocol records returned by the game servers.

These are immutable value objects, one per entity kind that shows up in
server responses:
    - Level, Creator, NewgroundsSong (level listings / downloads)
    - Profile, SearchedUser (user endpoints)
    - LevelComment, CommentUser, ProfileComment (comment endpoints)

The `wire()` keys are the indices the servers use. Field order is part of
the wire contract for positional records (Creator) and the encoding order
for keyed ones; do not reorder independently of the protocol.

Fields declared with `relation()` are relations. The response decoder fills
them in by cross-referencing other sections of the same response, using
dataclasses.replace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from gjcodec.schema import (
    BOOL,
    BYTES,
    F64,
    I32,
    STR,
    U8,
    U16,
    U32,
    U64,
    IndexedFormat,
    optional,
    relation,
    wire,
)
from gjcodec.serde import indexed


class IndexedRecord:
    """Mixin giving records their declared wire format."""

    FORMAT: ClassVar[IndexedFormat]

    @classmethod
    def from_gj_str(cls, text: str):
        return indexed.from_gj_str(cls, text)

    def to_gj_string(self) -> str:
        return indexed.to_gj_string(self)


@dataclass(frozen=True, kw_only=True)
class Creator(IndexedRecord):
    """
    Minimal user data attached to level listings.

    Positional, ':'-separated: user_id:name:account_id
    """

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat(":", keyed=False)

    user_id: int = wire("1", U64)
    name: str = wire("2", STR)
    account_id: Optional[int] = wire("3", optional(U64))


@dataclass(frozen=True, kw_only=True)
class NewgroundsSong(IndexedRecord):
    """
    A custom song hosted on Newgrounds.

    Properties:
        filesize: Size in megabytes, as sent by the servers
        link: Download link (percent-encoded by the servers)
    """

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat("~|~", keyed=True)

    song_id: int = wire("1", U64)
    name: str = wire("2", STR)
    index_3: Optional[int] = wire("3", optional(U64))
    artist: str = wire("4", STR)
    filesize: float = wire("5", F64)
    index_6: Optional[str] = wire("6", optional(STR))
    index_7: Optional[str] = wire("7", optional(STR))
    index_8: Optional[str] = wire("8", optional(STR))
    link: str = wire("10", STR)


@dataclass(frozen=True, kw_only=True)
class Level(IndexedRecord):
    """
    A level as returned by level listings and downloads.

    `creator_id` and `custom_song_id` are the raw ids sent by the servers.
    `creator` and `custom_song` are only populated by the listing decoder,
    when the matching entity appears in the same response.

    Properties:
        description: Raw bytes of the (base64 encoded) description
        level_data: Only present in downloads, never in listings
        difficulty: Difficulty numerator as sent by the servers
    """

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat(":", keyed=True)

    level_id: int = wire("1", U64)
    name: str = wire("2", STR)
    description: Optional[bytes] = wire("3", optional(BYTES))
    level_data: Optional[str] = wire("4", optional(STR))
    version: int = wire("5", U32)
    creator_id: int = wire("6", U64)
    difficulty: int = wire("9", I32)
    downloads: int = wire("10", U32)
    main_song: int = wire("12", U8, default=0)
    gd_version: int = wire("13", U8, default=0)
    likes: int = wire("14", I32)
    length: int = wire("15", U8, default=0)
    stars: int = wire("18", U8)
    featured: int = wire("19", I32, default=0)
    copy_of: int = wire("30", U64, default=0)
    two_player: bool = wire("31", BOOL, default=False)
    custom_song_id: Optional[int] = wire("35", optional(U64))
    coin_amount: int = wire("37", U8, default=0)
    coins_verified: bool = wire("38", BOOL, default=False)
    stars_requested: Optional[int] = wire("39", optional(U8))
    is_epic: bool = wire("42", BOOL, default=False)
    object_amount: Optional[int] = wire("45", optional(U32))
    index_46: Optional[str] = wire("46", optional(STR))
    index_47: Optional[str] = wire("47", optional(STR))

    creator: Optional[Creator] = relation(Creator)
    custom_song: Optional[NewgroundsSong] = relation(NewgroundsSong)

    @property
    def description_text(self) -> Optional[str]:
        if self.description is None:
            return None
        return self.description.decode("utf-8", errors="replace")


@dataclass(frozen=True, kw_only=True)
class Profile(IndexedRecord):
    """A player profile, as returned by the user info endpoint."""

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat(":", keyed=True)

    name: str = wire("1", STR)
    user_id: int = wire("2", U64)
    stars: int = wire("3", U32)
    demons: int = wire("4", U16)
    creator_points: int = wire("8", U16)
    primary_color: int = wire("10", U8)
    secondary_color: int = wire("11", U8)
    secret_coins: int = wire("13", U8)
    account_id: int = wire("16", U64)
    user_coins: int = wire("17", U16)
    index_18: Optional[str] = wire("18", optional(STR))
    index_19: Optional[str] = wire("19", optional(STR))
    youtube_url: Optional[str] = wire("20", optional(STR))
    cube_index: int = wire("21", U16, default=0)
    ship_index: int = wire("22", U8, default=0)
    ball_index: int = wire("23", U8, default=0)
    ufo_index: int = wire("24", U8, default=0)
    wave_index: int = wire("25", U8, default=0)
    robot_index: int = wire("26", U8, default=0)
    has_glow: bool = wire("28", BOOL, default=False)
    global_rank: Optional[int] = wire("30", optional(U32))
    spider_index: int = wire("43", U8, default=0)
    twitter_url: Optional[str] = wire("44", optional(STR))
    twitch_url: Optional[str] = wire("45", optional(STR))
    diamonds: int = wire("46", U32, default=0)
    death_effect_index: int = wire("48", U8, default=0)
    mod_level: int = wire("49", U8, default=0)


@dataclass(frozen=True, kw_only=True)
class SearchedUser(IndexedRecord):
    """A user returned by the search endpoint."""

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat(":", keyed=True)

    name: str = wire("1", STR)
    user_id: int = wire("2", U64)
    stars: int = wire("3", U32)
    demons: int = wire("4", U16)
    index_6: Optional[str] = wire("6", optional(STR))
    creator_points: int = wire("8", U16)
    icon_index: int = wire("9", U16)
    primary_color: int = wire("10", U8)
    secondary_color: int = wire("11", U8)
    secret_coins: int = wire("13", U8)
    icon_type: int = wire("14", U8)
    special: int = wire("15", U8, default=0)
    account_id: int = wire("16", U64)
    user_coins: int = wire("17", U16)


@dataclass(frozen=True, kw_only=True)
class CommentUser(IndexedRecord):
    """The author half of a level comment pair."""

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat("~", keyed=True)

    name: str = wire("1", STR)
    icon_index: int = wire("9", U16)
    primary_color: int = wire("10", U8)
    secondary_color: int = wire("11", U8)
    icon_type: int = wire("14", U8)
    glow: int = wire("15", U8)
    account_id: Optional[int] = wire("16", optional(U64))


@dataclass(frozen=True, kw_only=True)
class LevelComment(IndexedRecord):
    """
    A comment on a level.

    `user` is None when the author's account no longer exists.
    """

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat("~", keyed=True)

    content: Optional[bytes] = wire("2", optional(BYTES))
    user_id: int = wire("3", U64)
    likes: int = wire("4", I32)
    comment_id: int = wire("6", U64)
    is_flagged_spam: bool = wire("7", BOOL, default=False)
    time_since_post: str = wire("9", STR)
    progress: Optional[int] = wire("10", optional(U8))
    mod_level: int = wire("11", U8, default=0)
    special_color: Optional[str] = wire("12", optional(STR))

    user: Optional[CommentUser] = relation(CommentUser)


@dataclass(frozen=True, kw_only=True)
class ProfileComment(IndexedRecord):
    """A comment posted on a player's profile."""

    FORMAT: ClassVar[IndexedFormat] = IndexedFormat("~", keyed=True)

    content: Optional[bytes] = wire("2", optional(BYTES))
    likes: int = wire("4", I32)
    comment_id: int = wire("6", U64)
    time_since_post: str = wire("9", STR)


__all__ = [
    "IndexedRecord",
    "Creator",
    "NewgroundsSong",
    "Level",
    "Profile",
    "SearchedUser",
    "CommentUser",
    "LevelComment",
    "ProfileComment",
]
