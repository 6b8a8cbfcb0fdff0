"""Factories for the built-in encoders and detection of what the system offers."""

from __future__ import annotations

from dataclasses import dataclass

from robs.aac_encoder import FfmpegAacEncoder
from robs.errors import EncoderCreationFailedError
from robs.ffmpeg_encoder import FfmpegH264Encoder
from robs.interfaces import Encoder, EncoderFactory
from robs.nvenc_encoder import NvencH264Encoder


class FfmpegH264Factory(EncoderFactory):
    def encoder_type(self) -> str:
        return "ffmpeg_h264"

    def display_name(self) -> str:
        return "FFmpeg x264 (Software)"

    def codec_name(self) -> str:
        return "h264"

    def create(self) -> Encoder:
        return FfmpegH264Encoder()


class NvencH264Factory(EncoderFactory):
    def encoder_type(self) -> str:
        return "nvenc_h264"

    def display_name(self) -> str:
        return "NVIDIA NVENC H.264 (Hardware)"

    def codec_name(self) -> str:
        return "h264"

    def create(self) -> Encoder:
        """Create an NVENC encoder; raises if ffmpeg cannot use NVENC."""
        if not NvencH264Encoder.is_available():
            raise EncoderCreationFailedError(
                "NVENC not available. Ensure NVIDIA drivers are installed "
                "and FFmpeg supports h264_nvenc."
            )
        return NvencH264Encoder()


class FfmpegAacFactory(EncoderFactory):
    def encoder_type(self) -> str:
        return "ffmpeg_aac"

    def display_name(self) -> str:
        return "FFmpeg AAC (Audio)"

    def codec_name(self) -> str:
        return "aac"

    def create(self) -> Encoder:
        """Create an AAC encoder; raises if ffmpeg has no AAC support."""
        if not FfmpegAacEncoder.is_available():
            raise EncoderCreationFailedError(
                "AAC encoder not found. Ensure FFmpeg is installed with AAC support."
            )
        return FfmpegAacEncoder()


def available_video_encoders() -> list[EncoderFactory]:
    """Video encoder factories, hardware first; software x264 is always offered."""
    encoders: list[EncoderFactory] = []
    if NvencH264Encoder.is_available():
        encoders.append(NvencH264Factory())
    encoders.append(FfmpegH264Factory())
    return encoders


def available_audio_encoders() -> list[EncoderFactory]:
    return [FfmpegAacFactory()] if FfmpegAacEncoder.is_available() else []


def encoder_by_name(name: str) -> Encoder | None:
    """A new encoder of the given type, or None if unknown or unavailable."""
    if name == "ffmpeg_h264":
        return FfmpegH264Encoder()
    if name == "nvenc_h264":
        return NvencH264Encoder() if NvencH264Encoder.is_available() else None
    if name == "ffmpeg_aac":
        return FfmpegAacEncoder() if FfmpegAacEncoder.is_available() else None
    return None


@dataclass(frozen=True)
class EncoderDetection:
    nvenc_available: bool
    aac_available: bool
    gpu_count: int
    ffmpeg_available: bool

    def summary(self) -> str:
        parts = [
            "FFmpeg: available" if self.ffmpeg_available else "FFmpeg: NOT available",
            f"NVENC: available ({self.gpu_count} GPU)"
            if self.nvenc_available
            else "NVENC: not available",
            "AAC: available" if self.aac_available else "AAC: not available",
        ]
        return ", ".join(parts)


def detect_encoders() -> EncoderDetection:
    """Probe ffmpeg for the encoders it can run."""
    return EncoderDetection(
        nvenc_available=NvencH264Encoder.is_available(),
        aac_available=FfmpegAacEncoder.is_available(),
        gpu_count=NvencH264Encoder.gpu_count(),
        ffmpeg_available=FfmpegH264Encoder.is_available(),
    )