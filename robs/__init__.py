"""Scenes, software compositing, ffmpeg-driven encoders and outputs for streaming and recording."""

__version__ = "0.1.0"