"""Device-to-allow-list matching logic."""

from __future__ import annotations

from collections.abc import Collection

from adbforwarder.core.model import DEFAULT_ALLOW_LIST, DeviceInfo


def is_allowed(product: str | None, allow_list: Collection[str] = DEFAULT_ALLOW_LIST) -> bool:
    # Products are vendor firmware identifiers: exact, case-sensitive match only.
    if not product:
        return False
    return product in allow_list


def device_is_allowed(device: DeviceInfo, allow_list: Collection[str] = DEFAULT_ALLOW_LIST) -> bool:
    return is_allowed(device.product, allow_list)
