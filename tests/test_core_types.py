import threading
import uuid
from datetime import timedelta

import pytest

from robs.core_types import (
    SPEAKERS_2POINT1,
    SPEAKERS_5POINT1,
    SPEAKERS_7POINT1,
    AudioFormat,
    AudioInfo,
    AudioSpeaker,
    ColorSpace,
    EncoderCapabilities,
    EncoderId,
    EncoderRateControl,
    PixelFormat,
    ProfileId,
    RateControlMode,
    SourceId,
    TrackId,
    VideoInfo,
    VideoRange,
    next_object_id,
)


def test_object_ids_increase():
    first = next_object_id()
    second = next_object_id()
    assert second > first


def test_object_ids_unique_across_threads():
    results = []
    lock = threading.Lock()

    def worker():
        ids = [next_object_id() for _ in range(200)]
        with lock:
            results.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    later = next_object_id()
    assert len(results) == 800
    assert len(set(results)) == len(results)
    assert later > max(results)


def test_default_ids_are_distinct():
    a, b = SourceId(), SourceId()
    assert a.value != b.value
    assert a != b


def test_id_equality_is_per_kind():
    assert SourceId(5) == SourceId(5)
    assert hash(SourceId(5)) == hash(SourceId(5))
    assert SourceId(5) != EncoderId(5)
    assert {SourceId(5): "x"}[SourceId(5)] == "x"


def test_profile_and_track_ids():
    pid = ProfileId()
    assert isinstance(pid.value, uuid.UUID)
    assert pid == ProfileId(pid.value)
    assert TrackId(0) < TrackId(1)


@pytest.mark.parametrize(
    "fmt, expected",
    [
        (PixelFormat.RGBA, 4),
        (PixelFormat.BGRA, 4),
        (PixelFormat.RGB24, 3),
        (PixelFormat.BGR24, 3),
        (PixelFormat.YUY2, 2),
        (PixelFormat.UYVY, 2),
        (PixelFormat.NV12, 1),
        (PixelFormat.I444, 1),
    ],
)
def test_bytes_per_pixel(fmt, expected):
    assert fmt.bytes_per_pixel() == expected


@pytest.mark.parametrize(
    "fmt, expected",
    [
        (PixelFormat.NV12, True),
        (PixelFormat.I420, True),
        (PixelFormat.I422, True),
        (PixelFormat.I444, True),
        (PixelFormat.YUY2, False),
        (PixelFormat.UYVY, False),
        (PixelFormat.RGBA, False),
        (PixelFormat.BGRA, False),
        (PixelFormat.RGB24, False),
        (PixelFormat.BGR24, False),
    ],
)
def test_is_planar(fmt, expected):
    assert fmt.is_planar() is expected


@pytest.mark.parametrize(
    "fmt, expected",
    [(AudioFormat.U8, 1), (AudioFormat.S16, 2), (AudioFormat.S32, 4), (AudioFormat.F32, 4), (AudioFormat.F64, 8)],
)
def test_bytes_per_sample(fmt, expected):
    assert fmt.bytes_per_sample() == expected


def test_video_info_defaults():
    info = VideoInfo()
    assert (info.width, info.height) == (1920, 1080)
    assert info.fps() == 30.0
    assert info.format is PixelFormat.NV12
    assert info.range is VideoRange.PARTIAL
    assert info.color_space is ColorSpace.REC709


def test_fractional_fps():
    info = VideoInfo(fps_num=30000, fps_den=1001)
    assert info.fps() == pytest.approx(30000 / 1001)


def test_frame_duration():
    assert VideoInfo(fps_num=50).frame_duration() == timedelta(milliseconds=20)
    info = VideoInfo()
    assert info.frame_duration() * info.fps_num <= timedelta(seconds=1)


def test_frame_size_relations():
    info = VideoInfo(width=64, height=36)
    assert info.frame_size_bytes(PixelFormat.NV12) == info.frame_size_bytes(PixelFormat.I420)
    assert info.frame_size_bytes(PixelFormat.RGBA) == 2 * info.frame_size_bytes(PixelFormat.YUY2)
    assert info.frame_size_bytes(PixelFormat.I444) == info.frame_size_bytes(PixelFormat.RGB24)
    assert info.frame_size_bytes(PixelFormat.I422) == info.frame_size_bytes(PixelFormat.UYVY)
    assert info.frame_size_bytes(PixelFormat.BGRA) == info.frame_size_bytes(PixelFormat.RGBA)


def test_audio_info_defaults():
    info = AudioInfo()
    assert info.sample_rate == 48000
    assert info.format is AudioFormat.F32
    assert info.speakers == SPEAKERS_2POINT1
    assert info.channels() == len(SPEAKERS_2POINT1)


def test_audio_info_stereo_s16():
    info = AudioInfo(format=AudioFormat.S16, speakers=[AudioSpeaker.FL, AudioSpeaker.FR])
    assert info.bytes_per_frame() == 4
    assert info.speakers == (AudioSpeaker.FL, AudioSpeaker.FR)


def test_speaker_layouts():
    assert AudioInfo(speakers=SPEAKERS_5POINT1).channels() == 6
    assert AudioInfo(speakers=SPEAKERS_7POINT1).channels() == 8
    seven = AudioInfo(format=AudioFormat.S16, speakers=SPEAKERS_7POINT1)
    assert seven.bytes_per_frame() == 16
    assert SPEAKERS_7POINT1[: len(SPEAKERS_5POINT1)] == SPEAKERS_5POINT1


def test_capabilities_and_rate_control():
    caps = EncoderCapabilities(4096, 2160, 120, False, [PixelFormat.NV12])
    assert caps.supported_pixel_formats == (PixelFormat.NV12,)
    rc = EncoderRateControl(bitrate=6000, keyframe_interval=2, rate_control_mode=RateControlMode.CBR)
    assert rc.buffer_size is None
    assert RateControlMode("VBR") is RateControlMode.VBR