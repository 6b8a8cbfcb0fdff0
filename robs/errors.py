"""Exception hierarchy used throughout the package."""

from __future__ import annotations


class RobsError(Exception):
    """Base class of all errors raised by the package."""

    prefix = "Unknown error"

    def __init__(self, detail: object = "") -> None:
        self.detail = str(detail)
        super().__init__(f"{self.prefix}: {self.detail}")


class SourceNotFoundError(RobsError):
    prefix = "Source not found"


class EncoderNotFoundError(RobsError):
    prefix = "Encoder not found"


class OutputNotFoundError(RobsError):
    prefix = "Output not found"


class SceneNotFoundError(RobsError):
    prefix = "Scene not found"


class ProfileNotFoundError(RobsError):
    prefix = "Profile not found"


class SourceCreationFailedError(RobsError):
    prefix = "Failed to create source"


class EncoderCreationFailedError(RobsError):
    prefix = "Failed to create encoder"


class OutputCreationFailedError(RobsError):
    prefix = "Failed to create output"


class EncoderInitFailedError(RobsError):
    prefix = "Failed to initialize encoder"


class OutputConnectFailedError(RobsError):
    prefix = "Failed to connect output"


class EncodeFailedError(RobsError):
    prefix = "Failed to encode"


class DecodeFailedError(RobsError):
    prefix = "Failed to decode"


class PipelineError(RobsError):
    prefix = "Pipeline error"


class InvalidParameterError(RobsError):
    prefix = "Invalid parameter"


class PluginError(RobsError):
    prefix = "Plugin error"


class RobsIoError(RobsError):
    prefix = "IO error"


class SerializationError(RobsError):
    prefix = "Serialization error"


class UnknownError(RobsError):
    prefix = "Unknown error"


class FfmpegError(RobsError):
    prefix = "FFmpeg error"


class NetworkError(RobsError):
    prefix = "Network error"


class AuthFailedError(RobsError):
    prefix = "Authentication failed"


class ProfileError(RobsError):
    prefix = "Profile error"


class InvalidStateError(RobsError):
    prefix = "Invalid state"