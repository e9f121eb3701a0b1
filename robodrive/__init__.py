"""Binary command and telemetry packets for a drive robot."""

__version__ = "0.1.0"
__all__ = ["packet"]