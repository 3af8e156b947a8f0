from download.credentials import delete_login, is_logged_in, load_login, save_login
from ota.auth import LoginInfo

LOGIN = LoginInfo("CN", "1", "成功", "c2VjdXJpdHk=", "tok", "42")


def test_no_session_stored(data_dir):
    assert load_login() is None
    assert not is_logged_in()
    assert delete_login() is False


def test_save_load_delete(data_dir):
    save_login(LOGIN)
    assert data_dir.cookies_path.is_file()
    assert load_login() == LOGIN
    assert is_logged_in()

    assert delete_login() is True
    assert not data_dir.cookies_path.exists()
    assert not is_logged_in()


def test_failed_login_description_is_not_logged_in(data_dir):
    save_login(LoginInfo("CN", "0", "失败", "c2VjdXJpdHk=", "tok", "42"))
    assert load_login() is not None
    assert not is_logged_in()


def test_corrupt_session_file_is_ignored(data_dir):
    data_dir.data_dir.mkdir(parents=True, exist_ok=True)
    data_dir.cookies_path.write_text("{not json", encoding="utf-8")
    assert load_login() is None

    data_dir.cookies_path.write_text("[]", encoding="utf-8")
    assert load_login() is None
