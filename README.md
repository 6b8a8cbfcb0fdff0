# robs

Building blocks for a live streaming and recording studio, in plain Python
with no third-party runtime dependencies. The encoders and the file
recorder run the external `ffmpeg` program, so it must be installed and on
your `PATH` for those parts.

## What is inside

- **Core types** (`robs.core_types`): identifiers (`SourceId`, `EncoderId`,
  `OutputId`, `SceneId`, `SceneItemId`, `ProfileId`, `TrackId`) and
  `next_object_id()`; the `PixelFormat`, `AudioFormat`, `AudioSpeaker`,
  `VideoRange`, `ColorSpace` and `RateControlMode` enums; `VideoInfo`
  (`fps()`, `frame_duration()`, `frame_size_bytes()`), `AudioInfo`
  (`channels()`, `bytes_per_frame()`), `EncoderCapabilities`,
  `EncoderPreset` and `EncoderRateControl`.
- **Errors** (`robs.errors`): `RobsError` and one subclass per kind of
  failure, such as `PipelineError`, `OutputConnectFailedError`,
  `EncoderCreationFailedError` and `InvalidStateError`.
- **Interfaces** (`robs.interfaces`): the abstract `Source`, `VideoSource`,
  `AudioSource`, `Encoder` and `Output` classes and their factories
  (`SourceFactory`, `EncoderFactory`, `OutputFactory`); `PropertyDef`,
  `PropertyValue` and `PropertyType`; and the `VideoFrame`, `AudioFrame`
  and `EncodedPacket` data types.
- **Events** (`robs.events`): session, source, encoder, output, scene,
  profile, chat, error and log events. Each event class takes a `kind` and
  raises `ValueError` if a field that kind needs is missing. `EventBus` is
  an unbounded, thread-safe queue with `send`, `receive(timeout)` and
  `drain()`.
- **Scenes** (`robs.scene`, `robs.scene_item`, `robs.registry`): a `Scene`
  holds z-ordered `SceneItem`s (index 0 at the bottom) with position, scale,
  rotation, alignment, crop, bounds, visibility and a lock that freezes the
  transform. `SceneCollection` keeps scenes by name and tracks the current
  one; `Registry` keeps factories by name.
- **Rendering** (`robs.render`): `crop_frame`, nearest-neighbour
  `scale_frame`, `blend_pixels` and `render_scene`, which clears an output
  frame to the scene's background and alpha-blends every visible item onto
  it. Blending happens only for RGBA onto RGBA and BGRA onto BGRA; items of
  other format pairs are skipped.
- **Audio mixing** (`robs.audio_mixer`): `AudioMixer.mix` sums inputs read
  as 32-bit float samples and scales the result down when it would clip.
- **Encoders** (`robs.ffmpeg_encoder`, `robs.nvenc_encoder`,
  `robs.aac_encoder`): `FfmpegH264Encoder` (libx264), `NvencH264Encoder`
  (h264_nvenc) and `FfmpegAacEncoder` (AAC in ADTS). Each builds its
  `ffmpeg` command line (`command_args()`), starts it on `initialize`, feeds
  frames on `encode` — returning a packet when ffmpeg has produced output —
  and collects the rest on `flush`.
- **Encoder discovery** (`robs.encoder_factory`): factories for the three
  encoders, `available_video_encoders()`, `available_audio_encoders()`,
  `encoder_by_name()` and `detect_encoders()`, which probes `ffmpeg`.
- **Outputs** (`robs.file_output`, `robs.rtmp_output`, `robs.multi_output`):
  `FileOutput` pipes packet data into an `ffmpeg` process writing
  `<path>.<format>`; `RtmpOutput` with `RtmpOutputFactory`;
  `MultiDestinationOutput` connects, feeds and disconnects several outputs
  together; `StreamingDestinations` keeps `DestinationConfig`s and offers
  Twitch, YouTube and Facebook presets.
- **Pipeline and context** (`robs.pipeline`, `robs.context`): `Pipeline`
  holds video sources, numbered audio tracks and outputs, and starts or
  stops them together; `AppContext` bundles the three registries, an
  `EventBus` and a `Pipeline`.
- **Plugins** (`robs.plugin`, `robs.plugin_manager`): the abstract `Plugin`
  class and `PluginManager`, which finds `.dll`, `.so` and `.dylib` files
  in its plugin directories and registers the factories of loaded plugins.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## A short example

```python
from robs.core_types import PixelFormat, SourceId, next_object_id
from robs.interfaces import VideoFrame
from robs.render import render_scene
from robs.scene import Scene
from robs.scene_item import Position, Scale

scene = Scene.with_resolution("Main", 640, 360)
camera = SourceId(next_object_id())
item_id = scene.add_source(camera, "Camera")
scene.set_item_position(item_id, Position(10.0, 20.0))
scene.set_item_scale(item_id, Scale.uniform(0.5))

picture = VideoFrame(320, 180, PixelFormat.RGBA, bytearray(320 * 180 * 4))
output = VideoFrame(640, 360, PixelFormat.RGBA, bytearray(640 * 360 * 4))
render_scene(scene, {camera: picture}.get, output)
```

Frames passed to the rendering functions need a buffer holding the whole
picture. `VideoFrame.blank` allocates only the sum of the frame's line
sizes (one row per plane), which is too small for rendering.

Checking which encoders this machine can use:

```python
from robs.encoder_factory import detect_encoders

print(detect_encoders().summary())
```

## What it does not do

- There are no capture sources: `Source`, `VideoSource` and `AudioSource`
  are abstract, and you supply the implementations.
- `RtmpOutput` opens no network connection. `connect` pauses, logs the
  handshake steps and marks itself connected; `send_packet` only updates the
  statistics returned by `stats()`.
- `PluginManager.load_plugin` loads no code. It records the path as an
  `UnknownPlugin`, which provides no sources, encoders or outputs.
- The pipeline does not move media by itself. `Pipeline.start` activates
  sources and connects outputs, and the `AudioMixer` in `robs.pipeline`
  returns a silent frame; feeding frames to encoders and packets to outputs
  is up to the caller.
- There is no chat client, no profile storage, no user interface and no
  command-line program.