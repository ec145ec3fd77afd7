"""One-shot acquisition of the adb binary and server startup."""

from __future__ import annotations

import logging
import os
import platform
import stat
import urllib.error
import urllib.request
import zipfile
from dataclasses import dataclass
from pathlib import Path

from adbforwarder.core.errors import BootstrapError, TransportError, UnsupportedPlatformError
from adbforwarder.core.model import ForwarderConfig
from adbforwarder.transports.adb_cli import AdbCliTransport

DOWNLOAD_URL = "https://dl.google.com/android/repository/platform-tools-latest-{os}.zip"
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformTools:
    name: str
    archive_os: str
    binary: str


_PLATFORMS = {
    "Linux": PlatformTools(name="Linux", archive_os="linux", binary="adb"),
    "Windows": PlatformTools(name="Windows", archive_os="windows", binary="adb.exe"),
    "Darwin": PlatformTools(name="macOS", archive_os="darwin", binary="adb"),
}


def detect_platform(system: str | None = None) -> PlatformTools:
    system = system or platform.system()
    tools = _PLATFORMS.get(system)
    if tools is None:
        raise UnsupportedPlatformError(f"Unsupported platform '{system}'")
    return tools


def default_install_dir() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "adbforwarder"


def adb_binary_path(base_dir: Path, tools: PlatformTools) -> Path:
    return base_dir / "adb" / "platform-tools" / tools.binary


def download_platform_tools(tools: PlatformTools, base_dir: Path) -> None:
    url = DOWNLOAD_URL.format(os=tools.archive_os)
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BootstrapError(f"Could not create install directory {base_dir}: {exc}") from exc

    archive = base_dir / "adb.zip"
    try:
        urllib.request.urlretrieve(url, archive)
    except (urllib.error.URLError, OSError) as exc:
        raise BootstrapError(f"Downloading {url} failed: {exc}") from exc
    LOGGER.info("Download successful")

    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(base_dir / "adb")
    except (zipfile.BadZipFile, OSError) as exc:
        raise BootstrapError(f"Extracting {archive} failed: {exc}") from exc
    finally:
        archive.unlink(missing_ok=True)
    LOGGER.info("Extraction successful")


def set_executable(path: Path) -> None:
    LOGGER.info("Giving adb executable permissions")
    try:
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
    except OSError as exc:
        raise BootstrapError(f"Could not mark {path} executable: {exc}") from exc


def ensure_adb(
    config: ForwarderConfig,
    *,
    base_dir: Path | None = None,
    system: str | None = None,
) -> Path:
    """Return the adb binary to use, downloading platform-tools when missing."""
    if config.adb_path:
        return Path(config.adb_path)

    tools = detect_platform(system)
    LOGGER.info("Platform: %s", tools.name)

    base_dir = base_dir or default_install_dir()
    binary = adb_binary_path(base_dir, tools)
    if binary.exists():
        return binary

    LOGGER.info("ADB not found, downloading platform-tools...")
    download_platform_tools(tools, base_dir)
    if not binary.exists():
        raise BootstrapError(f"Downloaded platform-tools do not contain {binary}")
    if tools.binary == "adb":
        set_executable(binary)
    return binary


def resolve_adb_path(
    config: ForwarderConfig,
    *,
    base_dir: Path | None = None,
    system: str | None = None,
) -> Path | str:
    """Return the adb binary to use without downloading anything.

    Prefers the configured path, then a previously bootstrapped
    platform-tools install, then whatever `adb` is on PATH.
    """
    if config.adb_path:
        return Path(config.adb_path)
    try:
        tools = detect_platform(system)
    except UnsupportedPlatformError:
        return "adb"
    binary = adb_binary_path(base_dir or default_install_dir(), tools)
    return binary if binary.exists() else "adb"


def start_transport(config: ForwarderConfig, adb_path: Path | str) -> AdbCliTransport:
    transport = AdbCliTransport(
        str(adb_path),
        endpoint=config.endpoint,
        timeout_s=config.command_timeout_s,
    )
    LOGGER.info("Starting ADB server...")
    try:
        transport.connect(config.endpoint)
    except TransportError as exc:
        raise BootstrapError(f"Could not start adb server: {exc}") from exc
    return transport
