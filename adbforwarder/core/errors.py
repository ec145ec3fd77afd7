"""Domain-specific errors for adbforwarder."""


class AdbForwarderError(Exception):
    """Base error for adbforwarder."""


class ConfigValidationError(AdbForwarderError):
    """Raised when a config file does not conform to schema or semantics."""


class ConfigLoadError(AdbForwarderError):
    """Raised when reading config sources fails."""


class BootstrapError(AdbForwarderError):
    """Raised when the adb binary cannot be located, fetched, or started."""


class UnsupportedPlatformError(BootstrapError):
    """Raised when no platform-tools build exists for the running OS."""


class TransportError(AdbForwarderError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when the adb binary or server cannot be reached."""


class TransportCommandError(TransportError):
    """Raised when an adb command exits with a failure status."""


class TransportTimeoutError(TransportError):
    """Raised when an adb command does not finish in time."""
