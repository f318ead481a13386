"""
Decoding of complete server responses.

A response body is either one of two reserved literals (errors) or a list
of '#'-separated sections. Each endpoint knows how many sections it needs,
how to split each one into fragments and which record kind each fragment
holds. Sections past the ones an endpoint needs (pagination info, hashes)
are ignored.

Decoding is all-or-nothing: one bad fragment fails the whole call. The
only lenient step is cross-referencing, where a missing match simply
leaves the relation empty.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterator, List, TypeVar

from gjcodec.errors import AccessBlockedError, NotFoundError, UnexpectedFormatError
from gjcodec.model import (
    CommentUser,
    Creator,
    Level,
    LevelComment,
    NewgroundsSong,
    Profile,
    ProfileComment,
    SearchedUser,
)


logger = logging.getLogger(__name__)

R = TypeVar("R")

# Whole-body literals
NOT_FOUND_BODY = "-1"
ACCESS_BLOCKED_BODY = "error code: 1005"

SECTION_DELIMITER = "#"
LEVEL_DELIMITER = "|"
CREATOR_DELIMITER = "|"
SONG_DELIMITER = "~:~"
COMMENT_DELIMITER = "|"
COMMENT_PAIR_DELIMITER = ":"

# Author half of a comment pair whose account was deleted
DELETED_USER_SENTINEL = "1~~9~~10~~11~~14~~15~~16~"


def check_response_errors(response: str) -> None:
    """
    Raise if the body is one of the reserved error literals.

    Raises:
        NotFoundError: Body is "-1"
        AccessBlockedError: Body is the access-block page
    """
    if response == NOT_FOUND_BODY:
        raise NotFoundError()
    if response == ACCESS_BLOCKED_BODY:
        raise AccessBlockedError()


class Sections:
    """
    Ordered '#'-separated sections of a response body.

    `next()` hands them out one at a time and raises UnexpectedFormatError
    once they run out.
    """

    def __init__(self, response: str, delimiter: str = SECTION_DELIMITER):
        self._sections = response.split(delimiter)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._sections)

    def next(self) -> str:
        if self._pos >= len(self._sections):
            raise UnexpectedFormatError(
                f"expected at least {self._pos + 1} section(s), found {len(self._sections)}"
            )
        section = self._sections[self._pos]
        self._pos += 1
        return section


def split_response(response: str) -> Sections:
    """Check for reserved error bodies, then split into sections."""
    check_response_errors(response)
    return Sections(response)


def split_fragments(section: str, delimiter: str) -> Iterator[str]:
    """
    Split a section into fragments, dropping empty ones.

    Doubled delimiters produce empty strings, which are never a valid
    record encoding.
    """
    for fragment in section.split(delimiter):
        if fragment:
            yield fragment
        else:
            logger.debug("dropping empty fragment (delimiter %r)", delimiter)


def parse_fragments(section: str, delimiter: str, parse: Callable[[str], R]) -> List[R]:
    """Parse every non-empty fragment of `section` with `parse`."""
    return [parse(fragment) for fragment in split_fragments(section, delimiter)]


def _index_by(records: List[R], key: Callable[[R], int]) -> Dict[int, R]:
    # First occurrence wins; ids are unique in practice
    index: Dict[int, R] = {}
    for record in records:
        index.setdefault(key(record), record)
    return index


def parse_get_gj_levels_response(response: str) -> List[Level]:
    """
    Decode a level listing (search, featured, ...).

    Layout: levels '#' creators '#' songs [ '#' page info '#' hash ]

    Each level's creator and custom song are looked up by id in the
    other two sections. Levels whose creator or song is not included
    keep those relations empty.

    Raises:
        NotFoundError, AccessBlockedError: For reserved bodies
        UnexpectedFormatError: Fewer than three sections
        DecodeError: A fragment in any section is malformed
    """
    sections = split_response(response)

    raw_levels = sections.next()
    creators = parse_fragments(sections.next(), CREATOR_DELIMITER, Creator.from_gj_str)
    songs = parse_fragments(sections.next(), SONG_DELIMITER, NewgroundsSong.from_gj_str)
    levels = parse_fragments(raw_levels, LEVEL_DELIMITER, Level.from_gj_str)

    creators_by_id = _index_by(creators, lambda creator: creator.user_id)
    songs_by_id = _index_by(songs, lambda song: song.song_id)

    result = []
    for level in levels:
        creator = creators_by_id.get(level.creator_id)
        song = None
        if level.custom_song_id is not None:
            song = songs_by_id.get(level.custom_song_id)

        if creator is None:
            logger.debug("level %d: creator %d not in response", level.level_id, level.creator_id)
        if song is None and level.custom_song_id:
            logger.debug("level %d: song %d not in response", level.level_id, level.custom_song_id)

        result.append(replace(level, creator=creator, custom_song=song))

    logger.debug(
        "parsed %d level(s), %d creator(s), %d song(s)", len(result), len(creators), len(songs)
    )
    return result


def parse_download_gj_level_response(response: str) -> Level:
    """Decode a single downloaded level (first section only)."""
    sections = split_response(response)
    return Level.from_gj_str(sections.next())


def parse_get_gj_user_info_response(response: str) -> Profile:
    """Decode a profile. The whole body is the record; there are no sections."""
    check_response_errors(response)
    return Profile.from_gj_str(response)


def parse_get_gj_users_response(response: str) -> SearchedUser:
    """
    Decode a user search result.

    This endpoint used to perform a paginated prefix search. It now only
    matches account names exactly, and since those are unique at most one
    user comes back. The first section is that user.
    """
    sections = split_response(response)
    return SearchedUser.from_gj_str(sections.next())


def _parse_comment_pair(fragment: str) -> LevelComment:
    parts = fragment.split(COMMENT_PAIR_DELIMITER)
    if len(parts) != 2:
        raise UnexpectedFormatError(
            f"expected a comment:user pair, found {len(parts)} part(s) in {fragment!r}"
        )

    raw_comment, raw_user = parts
    comment = LevelComment.from_gj_str(raw_comment)

    if raw_user == DELETED_USER_SENTINEL:
        user = None
    else:
        user = CommentUser.from_gj_str(raw_user)

    return replace(comment, user=user)


def parse_get_gj_comments_response(response: str) -> List[LevelComment]:
    """
    Decode level comments.

    The first section is a '|'-separated list of pairs; each pair is a
    comment and its author, separated by ':'. A deleted author is sent as
    a fixed placeholder record and decodes to `user=None`.

    Raises:
        UnexpectedFormatError: A pair does not split into exactly two parts
    """
    sections = split_response(response)
    comments = parse_fragments(sections.next(), COMMENT_DELIMITER, _parse_comment_pair)
    logger.debug("parsed %d level comment(s)", len(comments))
    return comments


def parse_get_gj_account_comments_response(response: str) -> List[ProfileComment]:
    """Decode profile comments: a '|'-separated list in the first section."""
    sections = split_response(response)
    comments = parse_fragments(sections.next(), COMMENT_DELIMITER, ProfileComment.from_gj_str)
    logger.debug("parsed %d profile comment(s)", len(comments))
    return comments


__all__ = [
    "NOT_FOUND_BODY",
    "ACCESS_BLOCKED_BODY",
    "DELETED_USER_SENTINEL",
    "Sections",
    "check_response_errors",
    "split_response",
    "split_fragments",
    "parse_fragments",
    "parse_get_gj_levels_response",
    "parse_download_gj_level_response",
    "parse_get_gj_user_info_response",
    "parse_get_gj_users_response",
    "parse_get_gj_comments_response",
    "parse_get_gj_account_comments_response",
]
