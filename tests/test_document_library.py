import json
from pathlib import Path

from models.document import DocumentLibrary


def test_add_is_idempotent(library, tmp_path):
    first = library.add(tmp_path / "a.cbz", total_pages=12)
    again = library.add(tmp_path / "a.cbz")

    assert first is again
    assert first.file_type == "zip"
    assert first.total_pages == 12
    assert first.right_to_left


def test_state_round_trips_through_disk(library, tmp_path):
    record = library.add(tmp_path / "vol1.cbz", "zip", 20)
    record.right_to_left = False
    library.update_last_read_page(record.id, 7)
    library.record_aspect_ratio(record.id, 3, 0.66)
    library.save()

    reloaded = DocumentLibrary(state_file=library.state_file).get(record.id)
    assert reloaded.last_read_page == 7
    assert reloaded.right_to_left is False
    assert reloaded.aspect_ratios == {3: 0.66}
    assert reloaded.path == Path(record.path)


def test_corrupt_state_is_ignored(tmp_path):
    state = tmp_path / "state.json"
    state.write_text("{not json")
    assert DocumentLibrary(state_file=state).documents == {}


def test_bad_entries_are_skipped(tmp_path):
    state = tmp_path / "state.json"
    state.write_text(json.dumps({"documents": {
        "good": {"path": "/x/good.cbz", "file_type": "zip"},
        "bad": {"file_type": "zip"},
    }}))
    library = DocumentLibrary(state_file=state)
    assert list(library.documents) == ["good"]


def test_remove_notifies_listeners(library, tmp_path):
    record = library.add(tmp_path / "a.cbz")
    removed = []
    library.add_removal_listener(removed.append)

    assert library.remove(record.id)
    assert not library.remove(record.id)
    assert removed == [record.id]

    library.remove_removal_listener(removed.append)
    other = library.add(tmp_path / "b.cbz")
    library.remove(other.id)
    assert removed == [record.id]


def test_sorting(library, tmp_path):
    for name in ("Vol 10.cbz", "Vol 2.cbz", "Vol 1.cbz"):
        library.add(tmp_path / name)
    library.update_last_read_page(library.add(tmp_path / "Vol 2.cbz").id, 4)

    titles = [d.display_name for d in library.sorted_documents()]
    assert titles == ["Vol 1", "Vol 2", "Vol 10"]
    assert library.sorted_documents(by="last_read", reverse=True)[0].display_name == "Vol 2"
    assert [d.display_name for d in library.sorted_documents(by="added")] == ["Vol 10", "Vol 2", "Vol 1"]
