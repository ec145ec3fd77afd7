"""Core data models used across config loader, controller, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_ALLOW_LIST: frozenset[str] = frozenset(
    {
        "monterey",  # Oculus Quest 1
        "hollywood",  # Oculus Quest 2
        "pacific",  # Oculus Go
        "vr_monterey",  # Linux naming, Quest 1
        "vr_hollywood",  # Linux naming, Quest 2
        "vr_pacific",  # Linux naming, Go
    }
)


@dataclass(frozen=True)
class DeviceInfo:
    serial: str
    product: str | None = None
    state: str = "device"
    model: str | None = None
    device: str | None = None

    @property
    def label(self) -> str:
        return self.product if self.product else self.serial


@dataclass(frozen=True)
class ForwardRule:
    local_port: int
    remote_port: int


DEFAULT_FORWARD_RULES: tuple[ForwardRule, ...] = (
    ForwardRule(local_port=9943, remote_port=9943),
    ForwardRule(local_port=9944, remote_port=9944),
)
DEFAULT_LAUNCH_COMMAND = "am start -n alvr.client.quest/com.polygraphene.alvr.OvrActivity"


@dataclass(frozen=True)
class AdbEndpoint:
    host: str = "127.0.0.1"
    port: int = 5037


@dataclass(frozen=True)
class ForwarderConfig:
    allow_list: frozenset[str] = DEFAULT_ALLOW_LIST
    forward_ports: tuple[ForwardRule, ...] = DEFAULT_FORWARD_RULES
    launch_command: str = DEFAULT_LAUNCH_COMMAND
    settle_delay_ms: int = 1000
    endpoint: AdbEndpoint = AdbEndpoint()
    adb_path: str | None = None
    poll_interval_s: float = 1.0
    command_timeout_s: float = 30.0


@dataclass(frozen=True)
class DeviceConnected:
    serial: str


@dataclass(frozen=True)
class DeviceDisconnected:
    serial: str


ConnectionEvent = DeviceConnected | DeviceDisconnected


class ForwardOutcome(Enum):
    ABSENT = "absent"
    REJECTED = "rejected"
    LAUNCHED = "launched"
    FAILED = "failed"
