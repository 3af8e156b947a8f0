from pathlib import Path

import download.db
from download.db import get_db_path, init_db, is_healthy, repair_db
from download.query_repository import add_query_event, list_queries


def _log_query():
    add_query_event(
        session_id="s",
        codename="houji",
        system_version="OS1.0.5.0.UNCCNXM",
        android_version="14",
    )


def _clobber(db_path: Path) -> None:
    for suffix in ("-wal", "-shm"):
        Path(f"{db_path}{suffix}").unlink(missing_ok=True)
    db_path.write_bytes(b"this is not an sqlite database" * 100)


def test_db_path_lives_in_data_dir(data_dir):
    assert get_db_path() == data_dir.data_dir / "miota.db"


def test_healthy_database_is_left_alone(data_dir):
    _log_query()
    assert is_healthy()
    assert repair_db() is False
    assert len(list(list_queries())) == 1


def test_missing_database_is_not_repaired(data_dir):
    for path in data_dir.data_dir.glob("miota.db*"):
        path.unlink()
    assert repair_db() is False
    assert not data_dir.db_path.exists()


def test_unreadable_database_is_replaced(data_dir):
    _clobber(data_dir.db_path)
    assert not is_healthy()

    assert repair_db() is True

    assert is_healthy()
    assert (data_dir.data_dir / "miota.db.corrupt").is_file()
    assert list(list_queries()) == []
    _log_query()
    assert len(list(list_queries())) == 1


def test_failing_database_is_rebuilt_from_dump(data_dir, monkeypatch):
    _log_query()
    monkeypatch.setattr(download.db, "is_healthy", lambda: False)

    assert repair_db() is True

    assert [e.codename for e in list_queries()] == ["houji"]
    assert not (data_dir.data_dir / "miota-dump.sql").exists()
    init_db()
    assert is_healthy()
