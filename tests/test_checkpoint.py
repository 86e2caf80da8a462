# File: tests/test_checkpoint.py
import json

import pytest

from page_harvest.checkpoint import (
    CheckpointStore,
    CheckpointWriteError,
    pending_children,
    summarize,
)


def test_round_trip_preserves_order(tmp_path):
    store = CheckpointStore(tmp_path / "data.json")
    dataset = {
        "berlin": [{"name": "X", "url": "u1"}],
        "aachen": [{"name": "Dom", "url": "u2"}, {"name": "Ärzte", "url": "u3"}],
    }
    store.save(dataset)
    loaded = store.load()

    assert loaded == dataset
    assert list(loaded) == ["berlin", "aachen"]
    assert list(loaded["berlin"][0]) == ["name", "url"]


def test_written_file_is_indented_utf8(tmp_path):
    path = tmp_path / "data.json"
    CheckpointStore(path).save({"köln": [{"name": "Dom", "url": "u"}]})
    text = path.read_text(encoding="utf-8")
    assert "köln" in text
    assert text.startswith('{\n  "köln": [\n    {')
    assert not (tmp_path / "data.json.tmp").exists()


def test_missing_file_loads_empty(tmp_path):
    assert CheckpointStore(tmp_path / "absent.json").load() == {}


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"berlin": "not a list"}',
        "",
    ],
)
def test_unparsable_file_loads_empty(tmp_path, content):
    path = tmp_path / "data.json"
    path.write_text(content, encoding="utf-8")
    assert CheckpointStore(path).load() == {}
    # the corrupt file is left alone until the next save
    assert path.read_text(encoding="utf-8") == content


def test_save_creates_parent_dirs(tmp_path):
    path = tmp_path / "out" / "nested" / "data.json"
    CheckpointStore(path).save({})
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_write_failure_is_fatal(tmp_path):
    target = tmp_path / "taken"
    target.mkdir()
    with pytest.raises(CheckpointWriteError):
        CheckpointStore(target).save({"berlin": []})


def test_unserializable_item_is_fatal(tmp_path):
    with pytest.raises(CheckpointWriteError):
        CheckpointStore(tmp_path / "data.json").save({"berlin": [object()]})
    assert not (tmp_path / "data.json").exists()


def test_save_replaces_previous_content(tmp_path):
    store = CheckpointStore(tmp_path / "data.json")
    store.save({"berlin": []})
    store.save({"berlin": [], "hamburg": ["u"]})
    assert store.load() == {"berlin": [], "hamburg": ["u"]}


def test_pending_children_skips_known_keys():
    urls = [
        "https://example.com/explore/locations/c1/berlin/",
        "https://example.com/explore/locations/c2/hamburg/",
        "https://example.com/explore/locations/c3/munich",
    ]
    assert pending_children(urls, {"hamburg": []}) == [urls[0], urls[2]]


def test_summarize_counts_items():
    assert summarize({"berlin": ["a", "b"], "hamburg": []}) == {"berlin": 2, "hamburg": 0}
