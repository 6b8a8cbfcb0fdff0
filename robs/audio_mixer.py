"""Summing mixer for interleaved 32-bit float audio."""

from __future__ import annotations

from array import array
from typing import Iterable

from robs.core_types import AudioFormat, AudioInfo, AudioSpeaker
from robs.interfaces import AudioFrame

_FLOAT_SIZE = array("f").itemsize


class AudioMixer:
    """Adds input frames sample by sample and scales the sum down if it clips.

    Input data is read as native-endian 32-bit floats. The working buffer keeps
    the largest size ever needed, so samples beyond the current output length
    still take part in finding the peak.
    """

    def __init__(self, sample_rate: int = 48000, channels: int = 2) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._capacity = 0

    def mix(self, inputs: Iterable[AudioFrame], output_frames: int) -> AudioFrame:
        sample_count = output_frames * self.channels
        self._capacity = max(self._capacity, sample_count)
        mixed = array("f", [0.0]) * self._capacity

        for frame in inputs:
            wanted = frame.frames * len(frame.speakers)
            usable = min(wanted, len(frame.data) // _FLOAT_SIZE, len(mixed))
            samples = array("f")
            samples.frombytes(bytes(frame.data[: usable * _FLOAT_SIZE]))
            for index, sample in enumerate(samples):
                mixed[index] += sample

        peak = max((abs(sample) for sample in mixed), default=0.0)
        if peak > 1.0:
            factor = 1.0 / peak
            mixed = array("f", (sample * factor for sample in mixed))

        output = AudioFrame.blank(
            output_frames,
            AudioInfo(
                sample_rate=self.sample_rate,
                format=AudioFormat.F32,
                speakers=(AudioSpeaker.FL, AudioSpeaker.FR),
            ),
        )
        output.data = bytearray(mixed[:sample_count].tobytes())
        return output