"""Tests for gameshelf.codec — parsing, serializing and creating playlists."""

import asyncio
import json

import pytest

from gameshelf.codec import (
    ENTRY_FIELDS,
    PLAYLIST_FIELDS,
    MalformedDocument,
    Playlist,
    PlaylistEntry,
    coerce_field,
    create,
    parse,
    parse_file,
    serialize,
    write_file,
)


@pytest.fixture
def sample():
    return Playlist(
        id="pl-1",
        title="Platformers",
        author="Someone",
        description="Jump around",
        icon="data:image/png;base64,AAAA",
        games=[
            PlaylistEntry(id="g3", notes="start here"),
            PlaylistEntry(id="g1"),
            PlaylistEntry(id="g2", notes="ünïcode"),
        ],
    )


class TestCoerceField:
    def test_present_value_kept(self):
        assert coerce_field({"title": "x"}, "title", "") == "x"

    def test_missing_value_defaults(self):
        assert coerce_field({}, "title", "") == ""

    def test_wrong_type_defaults(self):
        assert coerce_field({"title": 5}, "title", "") == ""
        assert coerce_field({"title": None}, "title", "") == ""
        assert coerce_field({"title": ["a"]}, "title", "") == ""


class TestParse:
    def test_full_document(self, sample):
        assert parse(serialize(sample)) == sample

    def test_empty_object_is_fully_defaulted(self):
        pl = parse("{}")
        assert pl == Playlist(id="")
        assert pl.games == []

    def test_missing_title_defaults_to_empty(self):
        pl = parse(json.dumps({"id": "x", "author": "me"}))
        assert pl.title == ""
        assert pl.author == "me"

    def test_each_field_coerced_independently(self):
        pl = parse(json.dumps({"id": "x", "title": 12, "author": "me", "icon": None}))
        assert pl.title == ""
        assert pl.author == "me"
        assert pl.icon == ""

    def test_non_list_games_becomes_empty(self):
        pl = parse(json.dumps({"id": "x", "games": {"id": "g1"}}))
        assert pl.games == []

    def test_bad_game_entries_are_coerced(self):
        pl = parse(json.dumps({
            "id": "x",
            "games": [{"id": "g1", "notes": 3}, "junk", {"notes": "n"}, {"id": "g2"}],
        }))
        assert pl.games == [
            PlaylistEntry(id="g1", notes=""),
            PlaylistEntry(id="", notes=""),
            PlaylistEntry(id="", notes="n"),
            PlaylistEntry(id="g2", notes=""),
        ]

    def test_unknown_fields_ignored(self):
        pl = parse(json.dumps({"id": "x", "library": "arcade", "games": [{"id": "g", "extra": 1}]}))
        assert pl.id == "x"
        assert pl.games == [PlaylistEntry(id="g")]

    def test_bytes_input(self):
        assert parse(b'{"id": "x"}').id == "x"

    def test_invalid_json_raises(self):
        with pytest.raises(MalformedDocument):
            parse("}{not json")

    def test_non_object_raises(self):
        with pytest.raises(MalformedDocument):
            parse("[1, 2, 3]")

    def test_invalid_utf8_raises(self):
        with pytest.raises(MalformedDocument):
            parse(b'{"id": "\xff\xfe"}')


class TestSerialize:
    def test_field_order_is_canonical(self, sample):
        data = json.loads(serialize(sample))
        assert list(data) == [*PLAYLIST_FIELDS, "games"]
        assert list(data["games"][0]) == list(ENTRY_FIELDS)

    def test_deterministic(self, sample):
        assert serialize(sample) == serialize(parse(serialize(sample)))

    def test_games_order_preserved(self, sample):
        assert [g.id for g in parse(serialize(sample)).games] == ["g3", "g1", "g2"]

    def test_default_playlist_writes_every_field(self):
        data = json.loads(serialize(Playlist(id="x")))
        assert data == {
            "id": "x", "title": "", "author": "", "description": "", "icon": "", "games": [],
        }


class TestCreate:
    def test_fresh_id_and_defaults(self):
        pl = create()
        assert pl.id
        assert pl.title == "" and pl.author == "" and pl.description == ""
        assert pl.icon == ""
        assert pl.games == []

    def test_ids_are_unique(self):
        ids = {create().id for _ in range(200)}
        assert len(ids) == 200


class TestFiles:
    def test_write_then_parse_file(self, tmp_path, sample):
        path = tmp_path / "pl.json"
        asyncio.run(write_file(path, sample))
        assert asyncio.run(parse_file(path)) == sample

    def test_write_is_full_overwrite(self, tmp_path, sample):
        path = tmp_path / "pl.json"
        path.write_text("x" * 10_000)
        asyncio.run(write_file(path, sample))
        assert path.read_text(encoding="utf-8") == serialize(sample)

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(parse_file(tmp_path / "missing.json"))

    def test_malformed_file_reports_path(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json")
        with pytest.raises(MalformedDocument) as exc:
            asyncio.run(parse_file(path))
        assert exc.value.path == path
        assert "bad.json" in str(exc.value)

    def test_binary_file_is_malformed(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n\xff\xff")
        with pytest.raises(MalformedDocument):
            asyncio.run(parse_file(path))
