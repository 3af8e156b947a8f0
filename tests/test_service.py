import hashlib
import json

import pytest

import download.service
from conftest import (
    ACCOUNT_KEY,
    ACCOUNT_SSECURITY,
    LATEST_MD5,
    FakeDownloadSession,
    FakeUpdateSession,
    make_payload,
    make_rom,
)
from download.credentials import save_login
from download.query_repository import last_query, list_queries
from download.rom_repository import RomRecord, delete_rom, find_rom, list_roms, update_file_path, upsert_rom
from download.service import check_rom, cleanup_repository, get_or_download_rom, get_session_id, verify_md5
from ota.auth import LoginInfo
from ota.client import OTAClient
from ota.errors import DownloadError, RequestError
from ota.responses import parse_rom_info

CONTENT = b"rom-package-bytes" * 4096
CONTENT_MD5 = hashlib.md5(CONTENT).hexdigest()


def _info(current=None):
    return parse_rom_info(json.dumps(make_payload(current=current)))


def _downloadable_info():
    return _info(make_rom(md5=CONTENT_MD5, filename="houji-rom.zip"))


def test_check_rom_logs_and_caches():
    client = OTAClient(session=FakeUpdateSession())
    info = check_rom("houji", "OS1.0.5.0.UNCCNXM", "14", client=client)

    assert info.current_rom.branch == "F"
    ev = last_query()
    assert ev.codename == "houji"
    assert ev.system_version == "OS1.0.5.0.UNCCNXM"
    assert ev.android_version == "14"
    assert ev.port == "1"
    assert ev.status == "ok"
    assert ev.current_version == "OS1.0.5.0.UNCCNXM"
    assert ev.latest_version == "OS1.0.8.0.UNCCNXM"
    assert ev.session_id == get_session_id()

    versions = sorted(r.version for r in list_roms(device="houji"))
    assert versions == ["OS1.0.5.0.UNCCNXM", "OS1.0.8.0.UNCCNXM"]


def test_check_rom_uses_stored_login(monkeypatch):
    save_login(LoginInfo("CN", "1", "成功", ACCOUNT_SSECURITY, "tok", "42"))
    sess = FakeUpdateSession(key=ACCOUNT_KEY)
    real_client = download.service.OTAClient
    monkeypatch.setattr(
        download.service,
        "OTAClient",
        lambda credentials=None: real_client(session=sess, credentials=credentials),
    )

    check_rom("houji", "OS1.0.5.0.UNCCNXM", "14")

    assert sess.calls[0]["data"]["s"] == "2"
    assert last_query().port == "2"


def test_check_rom_without_branch_logs_no_info():
    current = make_rom()
    del current["branch"]
    client = OTAClient(session=FakeUpdateSession(payload=make_payload(current=current)))
    info = check_rom("houji", "OS9.9", "14", client=client)

    assert info.current_rom.branch is None
    assert last_query() is None
    assert next(iter(list_queries())).status == "no_info"
    assert list(list_roms()) == []


def test_check_rom_error_is_logged_and_raised():
    client = OTAClient(session=FakeUpdateSession(status_code=500, body=""))
    with pytest.raises(RequestError.HTTPError):
        check_rom("houji", "OS1.0.5.0.UNCCNXM", "14", client=client)
    assert next(iter(list_queries())).status == "error"


def test_history_is_newest_first():
    client = OTAClient(session=FakeUpdateSession())
    check_rom("houji", "OS1.0.1.0.UNCCNXM", "14", client=client)
    check_rom("shennong", "OS1.0.2.0.UNBCNXM", "14", client=client)

    assert [e.codename for e in list_queries()] == ["shennong", "houji"]
    assert [e.codename for e in list_queries(codename="houji")] == ["houji"]
    assert last_query().codename == "shennong"


def test_download_streams_verifies_and_records(data_dir):
    info = _downloadable_info()
    sess = FakeDownloadSession(CONTENT)
    stages = []

    rec = get_or_download_rom(info, "cdn1", session=sess, progress_cb=lambda s, d, t: stages.append(s))

    dest = data_dir.downloads_dir / "houji-rom.zip"
    assert rec.file_path == str(dest.resolve())
    assert dest.read_bytes() == CONTENT
    assert not dest.with_name("houji-rom.zip.part").exists()
    assert sess.calls[0]["url"].startswith("https://cdnorg.d.miui.com/")
    assert "download" in stages and "verify" in stages
    assert find_rom(CONTENT_MD5).file_path == rec.file_path

    # served from the repository the second time
    again = get_or_download_rom(info, session=sess)
    assert again.file_path == rec.file_path
    assert len(sess.calls) == 1


def test_download_resumes_partial_file(data_dir):
    data_dir.downloads_dir.mkdir(parents=True)
    (data_dir.downloads_dir / "houji-rom.zip.part").write_bytes(CONTENT[:1000])
    sess = FakeDownloadSession(CONTENT)

    rec = get_or_download_rom(_downloadable_info(), session=sess)

    assert sess.calls[0]["headers"] == {"Range": "bytes=1000-"}
    assert (data_dir.downloads_dir / "houji-rom.zip").read_bytes() == CONTENT
    assert rec.md5 == CONTENT_MD5


def test_download_restarts_when_range_ignored(data_dir):
    data_dir.downloads_dir.mkdir(parents=True)
    (data_dir.downloads_dir / "houji-rom.zip.part").write_bytes(b"garbage")

    get_or_download_rom(_downloadable_info(), session=FakeDownloadSession(CONTENT, honour_range=False))

    assert (data_dir.downloads_dir / "houji-rom.zip").read_bytes() == CONTENT


def test_download_no_resume_starts_over(data_dir):
    data_dir.downloads_dir.mkdir(parents=True)
    (data_dir.downloads_dir / "houji-rom.zip.part").write_bytes(b"garbage")
    sess = FakeDownloadSession(CONTENT)

    get_or_download_rom(_downloadable_info(), resume=False, session=sess)

    assert sess.calls[0]["headers"] == {}
    assert (data_dir.downloads_dir / "houji-rom.zip").read_bytes() == CONTENT


def test_download_complete_partial_file_is_verified_without_fetch(data_dir):
    data_dir.downloads_dir.mkdir(parents=True)
    (data_dir.downloads_dir / "houji-rom.zip.part").write_bytes(CONTENT)
    sess = FakeDownloadSession(CONTENT)

    rec = get_or_download_rom(_downloadable_info(), session=sess)

    assert sess.calls[0]["headers"] == {"Range": f"bytes={len(CONTENT)}-"}
    assert (data_dir.downloads_dir / "houji-rom.zip").read_bytes() == CONTENT
    assert not (data_dir.downloads_dir / "houji-rom.zip.part").exists()
    assert find_rom(CONTENT_MD5).file_path == rec.file_path


def test_download_without_length_reports_open_total(data_dir):
    seen = []
    get_or_download_rom(
        _downloadable_info(),
        session=FakeDownloadSession(CONTENT, send_length=False),
        progress_cb=lambda stage, done, total: seen.append((stage, done, total)),
    )

    download = [(done, total) for stage, done, total in seen if stage == "download"]
    assert download[-1] == (len(CONTENT), None)
    assert {total for _, total in download} == {None}


def test_download_checksum_mismatch_removes_partial(data_dir):
    with pytest.raises(DownloadError.ChecksumMismatch):
        get_or_download_rom(_downloadable_info(), session=FakeDownloadSession(b"corrupted" * 10))
    assert not (data_dir.downloads_dir / "houji-rom.zip.part").exists()
    assert not (data_dir.downloads_dir / "houji-rom.zip").exists()


def test_download_requires_package():
    current = make_rom()
    del current["md5"]
    with pytest.raises(DownloadError.NotDownloadable):
        get_or_download_rom(_info(current), session=FakeDownloadSession())


def test_verify_md5(tmp_path):
    path = tmp_path / "f.bin"
    path.write_bytes(CONTENT)
    verify_md5(path, CONTENT_MD5.upper())
    with pytest.raises(DownloadError.ChecksumMismatch):
        verify_md5(path, "0" * 32)


def test_upsert_keeps_existing_file_path():
    rom = _downloadable_info().current_rom
    upsert_rom(RomRecord.from_rom(rom, file_path="/tmp/x.zip"))
    upsert_rom(RomRecord.from_rom(rom))
    assert find_rom(CONTENT_MD5).file_path == "/tmp/x.zip"

    upsert_rom(RomRecord.from_rom(rom), keep_file_path=False)
    assert find_rom(CONTENT_MD5).file_path is None


def test_cleanup_forgets_missing_files(tmp_path):
    present = tmp_path / "present.zip"
    present.write_bytes(b"x")
    upsert_rom(RomRecord.from_rom(_downloadable_info().current_rom, file_path=str(present)))
    gone = _info(make_rom(md5=LATEST_MD5)).current_rom
    upsert_rom(RomRecord.from_rom(gone, file_path=str(tmp_path / "gone.zip")))

    stats = cleanup_repository()

    assert stats == {"total_records": 2, "missing_files": 1}
    assert find_rom(CONTENT_MD5).file_path == str(present)
    assert find_rom(LATEST_MD5).file_path is None

    update_file_path(CONTENT_MD5, None)
    assert find_rom(CONTENT_MD5).file_path is None


def test_delete_rom_keeps_file(tmp_path):
    pkg = tmp_path / "pkg.zip"
    pkg.write_bytes(b"x")
    upsert_rom(RomRecord.from_rom(_downloadable_info().current_rom, file_path=str(pkg)))

    delete_rom(CONTENT_MD5)

    assert find_rom(CONTENT_MD5) is None
    assert pkg.is_file()
