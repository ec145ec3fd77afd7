"""ADB transport implementation driving the adb binary."""

from __future__ import annotations

import logging
import re
import subprocess
import threading
from collections.abc import Callable, Sequence

from adbforwarder.core.errors import (
    TransportCommandError,
    TransportConnectError,
    TransportTimeoutError,
)
from adbforwarder.core.model import AdbEndpoint, DeviceInfo

_DEVICE_LINE_RE = re.compile(r"^(\S+)\s+(\S+)(?:\s+(.*))?$")
_PROPERTY_RE = re.compile(r"(\w+):(\S+)")
LOGGER = logging.getLogger(__name__)


class AdbCliTransport:
    def __init__(
        self,
        adb_path: str = "adb",
        *,
        endpoint: AdbEndpoint | None = None,
        timeout_s: float = 30.0,
    ) -> None:
        self.adb_path = adb_path
        self.endpoint = endpoint or AdbEndpoint()
        self.timeout_s = timeout_s

    def connect(self, endpoint: AdbEndpoint) -> None:
        self.endpoint = endpoint
        self._run(["start-server"])

    def list_devices(self) -> list[DeviceInfo]:
        result = self._run(["devices", "-l"])
        return parse_device_list(result.stdout)

    def create_forward(self, device: DeviceInfo, local_port: int, remote_port: int) -> None:
        self._run(["-s", device.serial, "forward", f"tcp:{local_port}", f"tcp:{remote_port}"])

    def execute_remote_command(
        self,
        device: DeviceInfo,
        command: str,
        output_sink: Callable[[str], None],
    ) -> None:
        cmd = self._base_cmd() + ["-s", device.serial, "shell", command]
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise TransportConnectError(f"adb binary not found at '{self.adb_path}'") from exc
        except OSError as exc:
            raise TransportConnectError(f"Could not start adb: {exc}") from exc

        # Reading stdout blocks until the device closes the stream, so the
        # deadline is enforced by killing the process from a timer.
        expired = threading.Event()

        def _expire() -> None:
            expired.set()
            proc.kill()

        watchdog = threading.Timer(self.timeout_s, _expire)
        watchdog.daemon = True
        watchdog.start()
        try:
            if proc.stdout is not None:
                for line in proc.stdout:
                    output_sink(line.rstrip("\r\n"))
            returncode = proc.wait()
        except (OSError, ValueError) as exc:
            raise TransportCommandError(
                f"Reading output of '{command}' on {device.serial} failed: {exc}"
            ) from exc
        finally:
            watchdog.cancel()
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            if proc.stdout is not None:
                proc.stdout.close()

        if expired.is_set():
            raise TransportTimeoutError(
                f"Remote command timed out on {device.serial} after {self.timeout_s}s"
            )
        if returncode != 0:
            raise TransportCommandError(
                f"Remote command '{command}' on {device.serial} exited with status {returncode}"
            )

    def _base_cmd(self) -> list[str]:
        return [self.adb_path, "-H", self.endpoint.host, "-P", str(self.endpoint.port)]

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        cmd = self._base_cmd() + list(args)
        LOGGER.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_s,
            )
        except FileNotFoundError as exc:
            raise TransportConnectError(f"adb binary not found at '{self.adb_path}'") from exc
        except subprocess.TimeoutExpired as exc:
            raise TransportTimeoutError(
                f"'adb {' '.join(args)}' timed out after {self.timeout_s}s"
            ) from exc
        except OSError as exc:
            raise TransportConnectError(f"Could not run adb: {exc}") from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise TransportCommandError(
                f"'adb {' '.join(args)}' failed with status {result.returncode}: {stderr}"
            )
        return result


def parse_device_list(output: str) -> list[DeviceInfo]:
    devices: list[DeviceInfo] = []
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("*") or line.startswith("List of devices"):
            continue
        match = _DEVICE_LINE_RE.match(line)
        if not match:
            continue
        serial, state, rest = match.group(1), match.group(2), match.group(3) or ""
        props = dict(_PROPERTY_RE.findall(rest))
        devices.append(
            DeviceInfo(
                serial=serial,
                product=props.get("product"),
                state=state,
                model=props.get("model"),
                device=props.get("device"),
            )
        )
    return devices
