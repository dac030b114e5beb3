import pytest

from mediadownloader.constants import (
    KEY_AUDIO_CODE,
    KEY_FILE_PATH,
    KEY_MESSAGE,
    KEY_PARAMETERS,
    KEY_SAVE_NAME,
    KEY_STATUS,
    KEY_SUFFIX,
    KEY_TITLE,
    KEY_USER_ID,
    KEY_VIDEO_CODE,
    KEY_VIDEO_FORMAT,
    MSG_DATABASE_EMPTY,
    MSG_ERROR_FILE_PATH,
    MSG_ERROR_ID,
    MSG_ERROR_PROGRESS,
    MSG_ERROR_SAVE_NAME,
    MSG_ERROR_SUFFIX,
    MSG_ERROR_TITLE,
    MSG_ID_EXISTS,
    MSG_ID_NOT_EXISTS,
    MSG_INVALID_AUDIO_ITAG,
    MSG_INVALID_VIDEO_FORMAT,
    MSG_INVALID_VIDEO_ITAG,
    STATUS_OK,
    STATUS_REFUSED,
    Specification,
)
from mediadownloader.database import DataBase
from mediadownloader.manager import DbManager, Validator


@pytest.fixture
def db(tmp_path):
    database = DataBase(tmp_path / "data")
    yield database
    database.close()


@pytest.fixture
def manager(db):
    return DbManager(db)


@pytest.fixture
def params(tmp_path):
    return {
        KEY_USER_ID: 1,
        "url": "https://example.com/video",
        KEY_AUDIO_CODE: 251,
        KEY_VIDEO_CODE: 0,
        KEY_VIDEO_FORMAT: "",
        KEY_TITLE: "A title",
        KEY_SAVE_NAME: "clip",
        KEY_FILE_PATH: str(tmp_path),
        KEY_SUFFIX: "mp3",
        "metadata": True,
    }


def test_is_open_db(manager, db):
    assert manager.is_open_db() == {KEY_STATUS: STATUS_OK}
    db.close()
    assert manager.is_open_db() == {KEY_STATUS: STATUS_REFUSED}


def test_add_and_read(manager, params):
    res = manager.add_download(params)
    assert res == {KEY_STATUS: STATUS_OK, KEY_MESSAGE: {}}
    read = manager.read_download({KEY_USER_ID: 1})
    assert read[KEY_STATUS] == STATUS_OK
    stored = read[KEY_PARAMETERS]
    assert stored[KEY_USER_ID] == 1
    assert stored[KEY_TITLE] == "A title"
    assert stored["progress"] == 0
    assert stored["metadata"] is True


def test_add_cuts_youtube_url(manager, params):
    params["url"] = "https://www.youtube.com/watch?v=abc&list=xyz"
    manager.add_download(params)
    stored = manager.read_download({KEY_USER_ID: 1})[KEY_PARAMETERS]
    assert stored["url"] == "https://www.youtube.com/watch?v=abc"


def test_add_duplicate_id(manager, params):
    manager.add_download(params)
    res = manager.add_download(params)
    assert res == {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: {KEY_USER_ID: MSG_ID_EXISTS}}


@pytest.mark.parametrize(
    "key, value, error_key, message",
    [
        (KEY_USER_ID, -5, KEY_USER_ID, MSG_ERROR_ID),
        (KEY_AUDIO_CODE, 100, KEY_AUDIO_CODE, MSG_INVALID_AUDIO_ITAG),
        (KEY_TITLE, "", KEY_TITLE, MSG_ERROR_TITLE),
        (KEY_SAVE_NAME, "a/b", KEY_SAVE_NAME, MSG_ERROR_SAVE_NAME),
        (KEY_SAVE_NAME, "CON", KEY_SAVE_NAME, MSG_ERROR_SAVE_NAME),
        (KEY_SUFFIX, "exe", KEY_SUFFIX, MSG_ERROR_SUFFIX),
    ],
)
def test_add_rejects_invalid_field(manager, params, key, value, error_key, message):
    params[key] = value
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_REFUSED
    assert res[KEY_MESSAGE][error_key] == message


def test_add_rejects_missing_path(manager, params, tmp_path):
    params[KEY_FILE_PATH] = str(tmp_path / "missing")
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_REFUSED
    assert res[KEY_MESSAGE] == {KEY_FILE_PATH: MSG_ERROR_FILE_PATH}
    assert manager.read_download({KEY_USER_ID: 1})[KEY_MESSAGE] == MSG_ID_NOT_EXISTS


def test_bad_video_format_reported_but_accepted(manager, params):
    params[KEY_VIDEO_FORMAT] = "abc"
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_OK
    assert res[KEY_MESSAGE] == {KEY_VIDEO_FORMAT: MSG_INVALID_VIDEO_FORMAT}


def test_bad_video_code_with_sr_format(manager, params):
    params[KEY_VIDEO_CODE] = 999
    params[KEY_VIDEO_FORMAT] = "401-sr"
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_REFUSED
    assert res[KEY_MESSAGE][KEY_VIDEO_CODE] == MSG_INVALID_VIDEO_ITAG


def test_video_code_unchecked_without_format(manager, params):
    params[KEY_VIDEO_CODE] = 999
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_OK
    assert KEY_VIDEO_CODE not in res[KEY_MESSAGE]


def test_add_on_closed_database(manager, db, params):
    db.close()
    res = manager.add_download(params)
    assert res[KEY_STATUS] == STATUS_REFUSED


def test_remove_download(manager, params):
    manager.add_download(params)
    assert manager.remove_download({KEY_USER_ID: 1}) == {KEY_STATUS: STATUS_OK}
    assert manager.remove_download({KEY_USER_ID: 1}) == {
        KEY_STATUS: STATUS_REFUSED,
        KEY_MESSAGE: MSG_ID_NOT_EXISTS,
    }


def test_remove_all(manager, params):
    assert manager.remove_all_downloads() == {
        KEY_STATUS: STATUS_REFUSED,
        KEY_MESSAGE: MSG_DATABASE_EMPTY,
    }
    manager.add_download(params)
    assert manager.remove_all_downloads() == {KEY_STATUS: STATUS_OK}
    assert manager.read_all_downloads()[KEY_MESSAGE] == MSG_DATABASE_EMPTY


def test_read_all(manager, params):
    assert manager.read_all_downloads() == {
        KEY_STATUS: STATUS_REFUSED,
        KEY_MESSAGE: MSG_DATABASE_EMPTY,
    }
    manager.add_download(params)
    params[KEY_USER_ID] = 2
    manager.add_download(params)
    res = manager.read_all_downloads()
    assert res[KEY_STATUS] == STATUS_OK
    items = res[KEY_PARAMETERS][KEY_PARAMETERS]
    assert {item[KEY_USER_ID] for item in items} == {1, 2}


def test_update_missing_id(manager):
    res = manager.update(Specification.PROGRESS, {KEY_USER_ID: 9, "progress": 10})
    assert res == {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: MSG_ID_NOT_EXISTS}


def test_update_progress(manager, params):
    manager.add_download(params)
    ok = manager.update(Specification.PROGRESS, {KEY_USER_ID: 1, "progress": 500})
    assert ok == {KEY_STATUS: STATUS_OK}
    assert manager.read_download({KEY_USER_ID: 1})[KEY_PARAMETERS]["progress"] == 500
    bad = manager.update(Specification.PROGRESS, {KEY_USER_ID: 1, "progress": 2000})
    assert bad == {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: MSG_ERROR_PROGRESS}


def test_update_audio_code(manager, params):
    manager.add_download(params)
    assert manager.update(Specification.AUDIO_CODE, {KEY_USER_ID: 1, KEY_AUDIO_CODE: 140}) == {
        KEY_STATUS: STATUS_OK
    }
    assert manager.read_download({KEY_USER_ID: 1})[KEY_PARAMETERS][KEY_AUDIO_CODE] == 140
    res = manager.update(Specification.AUDIO_CODE, {KEY_USER_ID: 1, KEY_AUDIO_CODE: 1})
    assert res[KEY_MESSAGE] == MSG_INVALID_AUDIO_ITAG


def test_update_download_state(manager, params):
    manager.add_download(params)
    res = manager.update(
        Specification.DOWNLOAD_STATE, {KEY_USER_ID: 1, "download_state": True}
    )
    assert res == {KEY_STATUS: STATUS_OK}
    assert manager.read_download({KEY_USER_ID: 1})[KEY_PARAMETERS]["download_state"] is True


def test_update_save_name_rejected(manager, params):
    manager.add_download(params)
    res = manager.update(Specification.SAVE_NAME, {KEY_USER_ID: 1, KEY_SAVE_NAME: "x:y"})
    assert res == {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: MSG_ERROR_SAVE_NAME}
    assert manager.read_download({KEY_USER_ID: 1})[KEY_PARAMETERS][KEY_SAVE_NAME] == "clip"


def test_update_unsupported_spec(manager, params):
    manager.add_download(params)
    assert manager.update(Specification.TITLE, {KEY_USER_ID: 1, KEY_TITLE: "x"}) == {}
    assert manager.update(Specification.UNKNOWN, {KEY_USER_ID: 1}) == {}


def test_validator_cut_url_leaves_other_urls():
    url = "https://example.com/a?x=1&y=2"
    assert Validator().cut_url(url) == url
    assert Validator().valid_suffix("mkv") is True
    assert Validator().valid_suffix("txt") is False