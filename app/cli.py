# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Command line front-end.

Parses arguments and dispatches to ROM checks, downloads, account login and
repository queries.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

import pyperclip
import requests
from tqdm import tqdm

from app import __version__
from app.config import AppConfig, load_config
from download import (
    check_rom,
    cleanup_repository,
    delete_login,
    get_or_download_rom,
    get_db_path,
    init_db,
    last_query,
    list_queries,
    load_login,
    repair_db,
    save_login,
)
from download.config import PATHS
from download.service import get_session_id
from ota import AccountClient, OTAClient, OTAError, format_report, summarize
from ota.config import OTAConfig
from ota.devices import ANDROID_VERSIONS, device_codes, device_name
from ota.rom import MIRRORS

logger = logging.getLogger(__name__)

COPY_TARGETS = MIRRORS + ("changelog",)


def make_progress_cb() -> Callable[[str, int, Optional[int]], None]:
    """Build a unified progress callback drawing one tqdm bar per stage.

    A None total draws an open-ended bar.
    """
    state: dict = {"bars": {}, "last": {}, "total": {}}

    def _cb(stage: str, done: int, total: Optional[int]) -> None:
        bars, last, totals = state["bars"], state["last"], state["total"]
        # New bar when the stage starts, its total changes or the counter resets
        if stage not in bars or total != totals.get(stage) or done < last.get(stage, 0):
            if stage in bars:
                bars[stage].close()
            bars[stage] = tqdm(
                total=total, unit="B", unit_scale=True, desc=stage.capitalize(), leave=True
            )
            last[stage] = 0
            totals[stage] = total
        delta = done - last[stage]
        if delta > 0:
            bars[stage].update(delta)
            last[stage] = done

    return _cb


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard, returning False when none is available."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as ex:
        logger.warning("Clipboard unavailable: %s", ex)
        return False
    logger.info("Copied %d characters to clipboard", len(text))
    return True


class MiotaApp:
    """
    CLI application class.
    Parses arguments and dispatches to check, download, login and friends.
    """

    def __init__(self) -> None:
        self.parser = argparse.ArgumentParser(
            prog="miota", description="Look up and download OTA ROM packages"
        )
        self.config = AppConfig()
        self._setup_args()

    def _setup_args(self) -> None:
        """Define command-line arguments and subcommands."""
        p = self.parser
        p.add_argument("--config", type=Path, help="path to config.toml")
        p.add_argument("-v", "--verbose", action="store_true", help="also log to stderr")
        p.add_argument("--version", action="version", version=f"miota {__version__}")

        subs = p.add_subparsers(dest="command", required=True)

        def add_device_args(sp: argparse.ArgumentParser) -> None:
            sp.add_argument("-c", "--codename", help="device codename (default: last query)")
            sp.add_argument("-s", "--system-version", help="system version (default: last query)")
            sp.add_argument("-a", "--android-version", help="Android version (default: last query)")

        # check
        chk = subs.add_parser("check", help="show ROM information for a device")
        add_device_args(chk)
        chk.add_argument("--raw", action="store_true", help="print the decrypted JSON response")
        chk.add_argument("--copy", choices=COPY_TARGETS, help="copy a link or the changelog")

        # download
        dl = subs.add_parser("download", help="download the current ROM package")
        add_device_args(dl)
        dl.add_argument("-m", "--mirror", choices=MIRRORS, help="download host")
        dl.add_argument("--no-resume", action="store_true", help="ignore partial downloads")
        dl.add_argument("--no-verify", action="store_true", help="skip md5 verification")

        # account
        lg = subs.add_parser("login", help="log in to unlock the extended endpoint")
        lg.add_argument("-u", "--account", required=True, help="account id, phone or e-mail")
        lg.add_argument("-p", "--password", help="password (prompted when omitted)")
        lg.add_argument("-g", "--global", dest="global_account", action="store_true",
                        help="global account (international endpoint)")
        subs.add_parser("logout", help="forget the stored login")
        subs.add_parser("status", help="show login status")

        # repository
        hist = subs.add_parser("history", help="list previous queries")
        hist.add_argument("-n", "--limit", type=int, default=20, help="number of entries")
        hist.add_argument("-c", "--codename", help="only this codename")
        subs.add_parser("cleanup", help="forget downloads whose files were removed")

        subs.add_parser("devices", help="list known codenames and Android versions")
        subs.add_parser("about", help="show version information")

    def _setup_logging(self, verbose: bool) -> None:
        """Setup logging to file in data directory, and stderr when verbose."""
        log_dir = PATHS.data_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers: List[logging.Handler] = [
            logging.FileHandler(log_dir / "app.log", mode="a", encoding="utf-8")
        ]
        if verbose:
            handlers.append(logging.StreamHandler(sys.stderr))
        logging.basicConfig(
            level=getattr(logging, self.config.log_level, logging.INFO),
            format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            handlers=handlers,
        )
        logger.info("miota %s started, session %s", __version__, get_session_id())

    def _resolve_device(self, args: argparse.Namespace) -> Optional[tuple[str, str, str]]:
        last = last_query()
        codename = args.codename or (last.codename if last else None)
        system = args.system_version or (last.system_version if last else None)
        android = args.android_version or (last.android_version if last else self.config.android_version)
        if not codename or not system:
            print("Error: --codename and --system-version are required (no previous query)")
            return None
        return codename, system, android

    def _client(self) -> OTAClient:
        cfg = OTAConfig(request_timeout=self.config.request_timeout)
        return OTAClient(cfg, credentials=load_login())

    def cmd_check(self, args: argparse.Namespace) -> int:
        device = self._resolve_device(args)
        if device is None:
            return 1
        codename, system, android = device
        client = self._client()

        if args.raw:
            print(client.get_rom_info(codename, system, android))
            return 0

        info = check_rom(codename, system, android, client=client)
        report = summarize(info, codename, system)
        print(format_report(report))

        if args.copy:
            if not report.has_package or report.links is None:
                print("Nothing to copy: no package information")
                return 1
            if args.copy == "changelog":
                text = report.changelog or ""
            else:
                text = report.links.get(args.copy)
            if copy_to_clipboard(text):
                print(f"Copied {args.copy} to clipboard")
        return 0

    def cmd_download(self, args: argparse.Namespace) -> int:
        device = self._resolve_device(args)
        if device is None:
            return 1
        codename, system, android = device
        info = check_rom(codename, system, android, client=self._client())
        report = summarize(info, codename, system)
        print(format_report(report).split("\n\nChangelog:")[0])
        print()

        rec = get_or_download_rom(
            info,
            args.mirror or self.config.mirror,
            resume=self.config.resume and not args.no_resume,
            verify=self.config.verify_md5 and not args.no_verify,
            timeout=self.config.request_timeout,
            progress_cb=make_progress_cb(),
        )
        print(f"Package: {rec.file_path}")
        return 0

    def cmd_login(self, args: argparse.Namespace) -> int:
        password = args.password or getpass.getpass("Password: ")
        cfg = OTAConfig(request_timeout=self.config.request_timeout)
        info = AccountClient(cfg).login(args.account, password, args.global_account)
        save_login(info)
        print(f"Logged in as {info.user_id} ({info.account_type}); using the extended endpoint")
        return 0

    def cmd_logout(self, _args: argparse.Namespace) -> int:
        if delete_login():
            print("Logged out")
        else:
            print("Not logged in")
        return 0

    def cmd_status(self, _args: argparse.Namespace) -> int:
        info = load_login()
        if info is not None and info.is_valid:
            print(f"Logged in as {info.user_id} ({info.account_type}); using the extended endpoint")
        else:
            print("No account; log in to use the extended endpoint")
        return 0

    def cmd_history(self, args: argparse.Namespace) -> int:
        events = list(list_queries(codename=args.codename, limit=args.limit))
        if not events:
            print("No queries yet")
            return 0
        for ev in events:
            found = ev.current_version or "-"
            print(
                f"{ev.created_at}  {ev.codename:<16} {ev.system_version:<24} "
                f"Android {ev.android_version:<3} port {ev.port}  {ev.status:<8} {found}"
            )
        return 0

    def cmd_cleanup(self, _args: argparse.Namespace) -> int:
        stats = cleanup_repository()
        print(f"Checked {stats['total_records']} ROMs, {stats['missing_files']} missing package(s) forgotten")
        return 0

    def cmd_devices(self, _args: argparse.Namespace) -> int:
        for codename in device_codes():
            print(f"{codename:<12} {device_name(codename)}")
        print(f"\nAndroid versions: {', '.join(ANDROID_VERSIONS)}")
        return 0

    def cmd_about(self, _args: argparse.Namespace) -> int:
        print(f"miota {__version__}")
        print("Look up ROM information and download links from the OTA update service.")
        print(f"Data directory: {PATHS.data_dir}")
        print(f"Database: {get_db_path()}")
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Entry point: parse args and invoke the appropriate workflow.

        :return: exit code (0 on success)
        """
        args = self.parser.parse_args(argv)
        self.config = load_config(args.config)
        self._setup_logging(args.verbose)
        if repair_db():
            print("Warning: local database was corrupt and has been rebuilt")
        init_db()

        handler = getattr(self, f"cmd_{args.command}")
        try:
            return handler(args)
        except OTAError as ex:
            logger.exception("%s failed", args.command)
            print(f"Error: {ex}")
            return 1
        except requests.RequestException as ex:
            logger.exception("%s failed", args.command)
            print(f"Network error: {ex}")
            return 1


def main() -> None:
    """Console script entry point."""
    sys.exit(MiotaApp().run())
