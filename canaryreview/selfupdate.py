"""Checking for newer releases and replacing the installed binary with one."""

from __future__ import annotations

import contextlib
import hashlib
import io
import json
import os
import platform
import posixpath
import subprocess
import sys
import tarfile
import tempfile
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, TextIO

RELEASE_REPO = "alansikora/codecanary"
API_BASE = "https://api.github.com"
CACHE_TTL = timedelta(hours=24)
CHECK_TIMEOUT = 3.0
API_TIMEOUT = 30.0
UPGRADE_TIMEOUT = 300.0
MAX_DOWNLOAD_BYTES = 256 << 20
CACHE_FILE = "version-check.json"
BINARY_NAME = "codecanary"

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


@dataclass
class Asset:
    """A downloadable file attached to a release."""

    name: str = ""
    browser_download_url: str = ""


@dataclass
class Release:
    """A published release and its assets."""

    tag_name: str = ""
    assets: list[Asset] = field(default_factory=list)


def _release_from_json(data: Any) -> Release:
    if not isinstance(data, dict):
        raise ValueError("release response is not a JSON object")
    assets = [
        Asset(
            name=str(item.get("name") or ""),
            browser_download_url=str(item.get("browser_download_url") or ""),
        )
        for item in data.get("assets") or []
        if isinstance(item, dict)
    ]
    return Release(tag_name=str(data.get("tag_name") or ""), assets=assets)


def _get(url: str, timeout: float, headers: dict[str, str] | None = None,
         limit: int | None = None) -> tuple[int, bytes]:
    """Perform a GET, returning the status and body (HTTP errors become statuses)."""
    request = urllib.request.Request(url, headers=headers or {}, method="GET")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            status = int(resp.status)
            body = resp.read(limit) if limit is not None else resp.read()
    except urllib.error.HTTPError as exc:
        return int(exc.code), b""
    return status, body


def parse_semver(version: str) -> list[int] | None:
    """Parse "vX.Y.Z" or "X.Y.Z" (pre-release suffixes ignored); None if malformed."""
    if version.startswith("v"):
        version = version[1:]
    parts = version.split(".", 2)
    if len(parts) != 3:
        return None
    numbers: list[int] = []
    for part in parts:
        part = part.split("-", 1)[0]
        if any(ch not in "0123456789" for ch in part):
            return None
        numbers.append(int(part) if part else 0)
    return numbers


def is_newer(current: str, latest: str) -> bool:
    """Report whether latest is a newer semantic version than current."""
    cur = parse_semver(current)
    lat = parse_semver(latest)
    if cur is None or lat is None:
        return False
    return lat > cur


def fetch_release(tag: str = "latest", timeout: float = API_TIMEOUT) -> Release:
    """Fetch a release by tag ("latest" or "" for the newest one)."""
    if tag in ("", "latest"):
        url = f"{API_BASE}/repos/{RELEASE_REPO}/releases/latest"
    else:
        url = f"{API_BASE}/repos/{RELEASE_REPO}/releases/tags/{tag}"
    status, body = _get(url, timeout, headers={"Accept": "application/vnd.github+json"})
    if status != 200:
        raise RuntimeError(f"GitHub API returned {status}")
    return _release_from_json(json.loads(body))


def _cache_path() -> Path:
    return Path.home() / ".codecanary" / CACHE_FILE


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def read_cache() -> tuple[str, datetime] | None:
    """Return the cached (latest version, check time), or None if there is no usable cache."""
    try:
        data = json.loads(_cache_path().read_text(encoding="utf-8"))
        return str(data.get("latest_version") or ""), _parse_time(str(data["checked_at"]))
    except (OSError, ValueError, KeyError, TypeError, AttributeError, RuntimeError):
        return None


def write_cache(latest: str) -> None:
    """Record latest as the newest known version, checked now."""
    path = _cache_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "latest_version": latest,
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }
    path.write_text(json.dumps(data), encoding="utf-8")


def _refresh_cache() -> None:
    with contextlib.suppress(Exception):
        write_cache(fetch_release("latest", CHECK_TIMEOUT).tag_name)


def check_cached(current_version: str) -> tuple[str, bool]:
    """Return (latest version, update available) from a 24-hour cache.

    When the cache is stale or missing, a background refresh is started and the
    stale value, if any, is returned.
    """
    if current_version in ("", "dev"):
        return "", False

    cache = read_cache()
    if cache is not None and datetime.now(timezone.utc) - cache[1] < CACHE_TTL:
        return cache[0], is_newer(current_version, cache[0])

    threading.Thread(target=_refresh_cache, daemon=True).start()

    if cache is not None:
        return cache[0], is_newer(current_version, cache[0])
    return "", False


def download_asset(url: str, timeout: float = UPGRADE_TIMEOUT) -> bytes:
    """Download an asset, reading at most 256 MB."""
    status, body = _get(url, timeout, limit=MAX_DOWNLOAD_BYTES)
    if status != 200:
        raise RuntimeError(f"HTTP {status} from {url}")
    return body


def verify_checksum(archive_data: bytes, asset_name: str, checksums_data: bytes) -> str:
    """Check the archive's SHA-256 against the checksums file; return the digest."""
    got = hashlib.sha256(archive_data).hexdigest()
    for line in checksums_data.decode("utf-8", errors="replace").split("\n"):
        fields = line.split()
        if len(fields) == 2 and fields[1] == asset_name:
            if fields[0] == got:
                return got
            raise ValueError(f"expected {fields[0]}, got {got}")
    raise ValueError(f"asset {asset_name} not found in checksums")


def extract_binary(archive_data: bytes) -> bytes:
    """Return the contents of the codecanary binary in a .tar.gz archive."""
    try:
        archive = tarfile.open(fileobj=io.BytesIO(archive_data), mode="r:gz")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ValueError(f"opening gzip: {exc}") from exc
    with archive:
        try:
            for member in archive:
                if not member.isreg():
                    continue
                clean = posixpath.normpath(member.name)
                if clean.startswith("/") or clean.startswith(".."):
                    continue
                if posixpath.basename(clean) == BINARY_NAME:
                    handle = archive.extractfile(member)
                    if handle is None:
                        continue
                    return handle.read(MAX_DOWNLOAD_BYTES)
        except (tarfile.TarError, OSError, EOFError) as exc:
            raise ValueError(f"reading tar: {exc}") from exc
    raise ValueError("codecanary binary not found in archive")


def replace_binary(path: str | os.PathLike[str], new_binary: bytes) -> None:
    """Atomically replace the file at path with an executable new_binary."""
    target = os.fspath(path)
    directory = os.path.dirname(target) or "."
    fd, tmp_path = tempfile.mkstemp(prefix="codecanary-upgrade-", dir=directory)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(new_binary)
        os.chmod(tmp_path, 0o755)
        os.replace(tmp_path, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _platform_names() -> tuple[str, str]:
    if sys.platform.startswith("linux"):
        os_name = "linux"
    elif sys.platform == "darwin":
        os_name = "darwin"
    elif sys.platform in ("win32", "cygwin"):
        os_name = "windows"
    else:
        os_name = sys.platform.rstrip("0123456789")
    machine = platform.machine().lower()
    return os_name, _ARCH_NAMES.get(machine, machine)


def _current_executable() -> str:
    candidate = sys.argv[0] if sys.argv and sys.argv[0] else ""
    if not candidate or not os.path.isfile(candidate):
        raise RuntimeError("finding current binary: cannot determine executable path")
    return os.path.realpath(candidate)


def upgrade(current_version: str, tag: str = "", out: TextIO | None = None) -> None:
    """Download and install a release: "" for latest, "canary", or a version tag."""
    out = out if out is not None else sys.stdout
    tag = tag or "latest"
    out.write("Checking for updates...\n")

    try:
        release = fetch_release(tag, API_TIMEOUT)
    except (OSError, RuntimeError, ValueError) as exc:
        raise RuntimeError(f"fetching release: {exc}") from exc

    if tag == "latest" and current_version != "dev" and not is_newer(
        current_version, release.tag_name
    ):
        out.write(f"Already up to date ({current_version}).\n")
        return

    os_name, arch = _platform_names()
    suffix = f"_{os_name}_{arch}.tar.gz"
    asset = next((a for a in release.assets if a.name.endswith(suffix)), None)
    if asset is None:
        raise RuntimeError(
            f"no release asset found for {os_name}/{arch} in {release.tag_name}"
        )
    checksums = next((a for a in release.assets if a.name == "checksums.txt"), None)
    if checksums is None:
        raise RuntimeError(
            f"release {release.tag_name} is missing checksums.txt — "
            "refusing to install unverified binary"
        )

    out.write(f"Downloading codecanary {release.tag_name} for {os_name}/{arch}...\n")

    try:
        archive_data = download_asset(asset.browser_download_url, UPGRADE_TIMEOUT)
    except (OSError, RuntimeError) as exc:
        raise RuntimeError(f"downloading archive: {exc}") from exc
    try:
        checksums_data = download_asset(checksums.browser_download_url, API_TIMEOUT)
    except (OSError, RuntimeError) as exc:
        raise RuntimeError(f"downloading checksums: {exc}") from exc
    try:
        verify_checksum(archive_data, asset.name, checksums_data)
    except ValueError as exc:
        raise RuntimeError(f"checksum verification failed: {exc}") from exc

    try:
        binary = extract_binary(archive_data)
    except ValueError as exc:
        raise RuntimeError(f"extracting binary: {exc}") from exc

    exec_path = _current_executable()
    try:
        replace_binary(exec_path, binary)
    except OSError as exc:
        raise RuntimeError(f"replacing binary: {exc}") from exc

    if sys.platform == "darwin":
        with contextlib.suppress(OSError):
            subprocess.run(
                ["codesign", "--force", "--sign", "-", exec_path],
                check=False,
                capture_output=True,
            )

    if tag == "latest":
        with contextlib.suppress(OSError):
            write_cache(release.tag_name)

    out.write(f"Upgraded to codecanary {release.tag_name}.\n")