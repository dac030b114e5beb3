import pytest

from mediadownloader.constants import DATABASE_NAME, Specification
from mediadownloader.database import DataBase
from mediadownloader.download import Download


def _download(download_id: int, **overrides) -> Download:
    fields = dict(
        id=download_id,
        url="https://www.youtube.com/watch?v=abc",
        audio_code=251,
        video_code=401,
        video_format="",
        title="A title",
        save_name="clip",
        file_path="/tmp",
        suffix="mkv",
        metadata=True,
        subtitles=False,
        auto_generated_subtitles=True,
    )
    fields.update(overrides)
    return Download(**fields)


@pytest.fixture
def db(tmp_path):
    database = DataBase(tmp_path)
    yield database
    database.close()


def _fields(d: Download) -> tuple:
    return (
        d.id, d.url, d.audio_code, d.video_code, d.video_format, d.title,
        d.save_name, d.file_path, d.suffix, d.progress, d.download_state,
        d.metadata, d.subtitles, d.auto_generated_subtitles,
    )


def test_new_database_is_open_and_empty(db, tmp_path):
    assert db.is_open()
    assert db.is_empty()
    assert db.path == tmp_path / DATABASE_NAME
    assert db.path.exists()


def test_add_and_read_round_trip(db):
    original = _download(7)
    assert db.add(original)
    assert not db.is_empty()
    assert _fields(db.read(7)) == _fields(original)


def test_add_resets_progress_and_state(db):
    assert db.add(_download(3, progress=500, download_state=True))
    stored = db.read(3)
    assert stored.progress == 0
    assert stored.download_state is False


def test_duplicate_id_rejected(db):
    assert db.add(_download(1))
    assert not db.add(_download(1, title="Other"))
    assert db.read(1).title == "A title"


def test_exists(db):
    assert not db.exists(5)
    db.add(_download(5))
    assert db.exists(5)


def test_read_missing_is_none(db):
    assert db.read(99) is None


def test_remove(db):
    db.add(_download(1))
    assert db.remove(1)
    assert not db.exists(1)
    assert not db.remove(1)


def test_remove_all(db):
    db.add(_download(1))
    db.add(_download(2))
    assert db.remove_all()
    assert db.is_empty()
    assert not db.remove_all()


def test_read_all_returns_every_row(db):
    for download_id in (4, 2, 9):
        db.add(_download(download_id))
    assert sorted(d.id for d in db.read_all()) == [2, 4, 9]


@pytest.mark.parametrize(
    "column, value, attribute",
    [
        ("audio_code", 140, "audio_code"),
        ("video_code", 137, "video_code"),
        ("video_format", "401-sr", "video_format"),
        ("save_name", "renamed", "save_name"),
        ("file_path", "/var/data", "file_path"),
        ("suffix", "mp4", "suffix"),
        ("progress", 1000, "progress"),
        ("download_state", True, "download_state"),
        ("metadata", False, "metadata"),
        ("subtitles", True, "subtitles"),
        ("auto_generated_subtitles", False, "auto_generated_subtitles"),
    ],
)
def test_update_column(db, column, value, attribute):
    db.add(_download(1))
    assert db.update(1, column, value)
    assert getattr(db.read(1), attribute) == value


def test_update_by_specification(db):
    db.add(_download(1))
    assert db.update(1, Specification.SUFFIX, "webm")
    assert db.read(1).suffix == "webm"


def test_update_missing_id_returns_false(db):
    assert not db.update(42, "progress", 10)


@pytest.mark.parametrize("column", ["title", "id", "nonsense; DROP TABLE downloads"])
def test_update_rejects_other_columns(db, column):
    db.add(_download(1))
    with pytest.raises(ValueError):
        db.update(1, column, "x")
    assert db.exists(1)


def test_data_persists_across_reopen(tmp_path):
    with DataBase(tmp_path) as first:
        first.add(_download(11))
    with DataBase(tmp_path) as second:
        assert second.exists(11)
        assert second.read(11).save_name == "clip"


def test_close_and_context_manager(tmp_path):
    with DataBase(tmp_path) as database:
        assert database.is_open()
    assert not database.is_open()
    assert database.is_empty()
    assert not database.add(_download(1))
    assert database.read_all() == []


def test_unopenable_directory_leaves_database_closed(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    database = DataBase(blocker / "sub")
    assert not database.is_open()
    assert not database.exists(1)
    assert database.read(1) is None