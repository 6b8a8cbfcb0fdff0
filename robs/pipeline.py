"""The media pipeline: video and audio chains feeding a set of outputs."""

from __future__ import annotations

import dataclasses
import logging

from robs.core_types import (
    AudioFormat,
    AudioInfo,
    AudioSpeaker,
    EncoderId,
    OutputId,
    SourceId,
    TrackId,
)
from robs.errors import PipelineError
from robs.interfaces import AudioFrame, AudioSource, EncodedPacket, Encoder, Output, VideoSource

_log = logging.getLogger(__name__)


class VideoPipeline:
    """Video sources and the encoder their picture goes to."""

    def __init__(self) -> None:
        self.sources: dict[SourceId, VideoSource] = {}
        self.encoder: Encoder | None = None
        self.active = False

    def add_source(self, source: VideoSource) -> SourceId:
        self.sources[source.id] = source
        return source.id

    def remove_source(self, source_id: SourceId) -> None:
        """Remove a source; an unknown id is ignored."""
        self.sources.pop(source_id, None)

    def set_encoder(self, encoder: Encoder) -> EncoderId:
        self.encoder = encoder
        return encoder.id

    async def start(self) -> None:
        """Activate every source."""
        self.active = True
        for source in list(self.sources.values()):
            await source.activate()

    async def stop(self) -> None:
        """Deactivate every source."""
        self.active = False
        for source in list(self.sources.values()):
            await source.deactivate()


class AudioMixer:
    """Produces the frame that the sources of one track are mixed into."""

    def __init__(self, sample_rate: int = 48000, channels: int = 2) -> None:
        self.sample_rate = sample_rate
        self.channels = channels

    def mix(self, inputs: list[AudioFrame]) -> AudioFrame:
        """A silent stereo float frame as long as the longest input.

        Without inputs a 1024-frame frame in the default audio layout is returned.
        """
        if not inputs:
            return AudioFrame.blank(1024, AudioInfo())
        longest = max(frame.frames for frame in inputs)
        return AudioFrame.blank(
            longest,
            AudioInfo(
                sample_rate=self.sample_rate,
                format=AudioFormat.F32,
                speakers=(AudioSpeaker.FL, AudioSpeaker.FR),
            ),
        )


class AudioPipeline:
    """The audio sources of one track and the encoder of that track."""

    def __init__(self, track: TrackId) -> None:
        self.track = track
        self.sources: dict[SourceId, AudioSource] = {}
        self.encoder: Encoder | None = None
        self.mixer = AudioMixer()
        self.active = False

    def add_source(self, source: AudioSource) -> SourceId:
        self.sources[source.id] = source
        return source.id

    def set_encoder(self, encoder: Encoder) -> None:
        self.encoder = encoder

    async def start(self) -> None:
        self.active = True
        for source in list(self.sources.values()):
            await source.activate()

    async def stop(self) -> None:
        self.active = False
        for source in list(self.sources.values()):
            await source.deactivate()


class OutputManager:
    """The outputs encoded packets are delivered to."""

    def __init__(self) -> None:
        self.outputs: dict[OutputId, Output] = {}

    def add_output(self, output: Output) -> OutputId:
        self.outputs[output.id] = output
        return output.id

    def remove_output(self, output_id: OutputId) -> None:
        """Remove an output; an unknown id is ignored."""
        self.outputs.pop(output_id, None)

    async def connect_all(self) -> None:
        for output in list(self.outputs.values()):
            await output.connect()

    async def disconnect_all(self) -> None:
        for output in list(self.outputs.values()):
            await output.disconnect()

    async def send_to_all(self, packet: EncodedPacket) -> None:
        """Send a copy of ``packet`` to every output; the first failure stops delivery."""
        for output in list(self.outputs.values()):
            await output.send_packet(dataclasses.replace(packet))


class Pipeline:
    """Video chain, numbered audio tracks and outputs, started and stopped together."""

    def __init__(self) -> None:
        self.video_pipeline = VideoPipeline()
        self.audio_pipelines: dict[TrackId, AudioPipeline] = {}
        self.output_manager = OutputManager()
        self._running = False

    def add_video_source(self, source: VideoSource) -> SourceId:
        return self.video_pipeline.add_source(source)

    def remove_video_source(self, source_id: SourceId) -> None:
        self.video_pipeline.remove_source(source_id)

    def set_video_encoder(self, encoder: Encoder) -> EncoderId:
        return self.video_pipeline.set_encoder(encoder)

    def add_audio_track(self) -> TrackId:
        """Add a track numbered by the count of tracks present."""
        track = TrackId(len(self.audio_pipelines))
        self.audio_pipelines[track] = AudioPipeline(track)
        return track

    def remove_audio_track(self, track: TrackId) -> None:
        self.audio_pipelines.pop(track, None)

    def _track(self, track: TrackId) -> AudioPipeline:
        pipeline = self.audio_pipelines.get(track)
        if pipeline is None:
            raise PipelineError("Track not found")
        return pipeline

    def add_audio_source_to_track(self, track: TrackId, source: AudioSource) -> SourceId:
        return self._track(track).add_source(source)

    def set_audio_encoder(self, track: TrackId, encoder: Encoder) -> None:
        self._track(track).set_encoder(encoder)

    def add_output(self, output: Output) -> OutputId:
        return self.output_manager.add_output(output)

    def remove_output(self, output_id: OutputId) -> None:
        self.output_manager.remove_output(output_id)

    async def start(self) -> None:
        """Activate sources, then connect outputs; does nothing if already running."""
        if self._running:
            return
        self._running = True
        await self.video_pipeline.start()
        for pipeline in list(self.audio_pipelines.values()):
            await pipeline.start()
        await self.output_manager.connect_all()
        _log.info("Pipeline started")

    async def stop(self) -> None:
        """Disconnect outputs, then deactivate sources; does nothing if not running."""
        if not self._running:
            return
        self._running = False
        await self.output_manager.disconnect_all()
        await self.video_pipeline.stop()
        for pipeline in list(self.audio_pipelines.values()):
            await pipeline.stop()
        _log.info("Pipeline stopped")

    def is_running(self) -> bool:
        return self._running