"""
Tests for dict/JSON/YAML export of decoded records.

These ensure lossless round-trip using the explicit serialization
functions in `gjcodec.serialization`.
"""

from gjcodec.model import Creator, Level, LevelComment, CommentUser, NewgroundsSong
from gjcodec.response import parse_get_gj_levels_response
from gjcodec.serialization import (
    record_to_dict,
    record_from_dict,
    records_to_json,
    records_from_json,
    records_to_yaml,
    records_from_yaml,
)


def build_sample_levels():
    level = Level(
        level_id=1,
        name="Sample",
        description=b"\x00binary\xff",
        version=2,
        creator_id=10,
        difficulty=30,
        downloads=100,
        likes=5,
        stars=4,
        custom_song_id=500,
    )
    song = NewgroundsSong(
        song_id=500, name="Song", artist="Artist", filesize=9.56, link="https://x/y.mp3"
    )
    body = "#".join([
        level.to_gj_string(),
        Creator(user_id=10, name="Maker", account_id=None).to_gj_string(),
        song.to_gj_string(),
    ])
    return parse_get_gj_levels_response(body)


def test_dict_shape():
    level = build_sample_levels()[0]
    d = record_to_dict(level)
    assert d["description"] == "AGJpbmFyef8="
    assert d["creator"] == {"user_id": 10, "name": "Maker", "account_id": None}
    assert d["custom_song"]["song_id"] == 500


def test_dict_roundtrip():
    comment = LevelComment(
        content=b"hey", user_id=1, likes=0, comment_id=2, time_since_post="now",
        user=CommentUser(name="A", icon_index=1, primary_color=2, secondary_color=3, icon_type=0, glow=0),
    )
    assert record_from_dict(LevelComment, record_to_dict(comment)) == comment


def test_json_roundtrip():
    levels = build_sample_levels()
    restored = records_from_json(Level, records_to_json(levels))
    assert restored == levels


def test_yaml_roundtrip():
    levels = build_sample_levels()
    restored = records_from_yaml(Level, records_to_yaml(levels))
    assert restored == levels
