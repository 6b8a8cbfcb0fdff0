import subprocess
from unittest import mock

import pytest

from robs.core_types import MediaType, PixelFormat, RateControlMode
from robs.interfaces import PropertyType, PropertyValue, VideoFrame
from robs.nvenc_encoder import NvencH264Encoder, create_nvenc_h264_encoder


def _completed(stdout: bytes) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(["ffmpeg"], 0, stdout=stdout, stderr=b"")


def _value_after(args, flag):
    return args[args.index(flag) + 1]


def test_defaults():
    encoder = NvencH264Encoder()
    assert encoder.codec_name() == "h264"
    assert encoder.media_type() is MediaType.VIDEO
    assert encoder.get_parameter("bitrate") == PropertyValue(PropertyType.INT, 6000)
    assert encoder.get_parameter("profile") == PropertyValue(PropertyType.ENUM, "high")
    assert encoder.get_parameter("gpu") == PropertyValue(PropertyType.INT, 0)
    assert encoder.get_parameter("nonexistent") is None
    assert encoder.input_info() is None
    assert encoder.output_info() is None


def test_caps_are_hardware():
    caps = NvencH264Encoder().caps()
    assert caps.supports_hardware is True
    assert tuple(caps.supported_pixel_formats) == (PixelFormat.NV12, PixelFormat.I420)
    assert caps.max_width == 4096


def test_presets_and_current():
    encoder = NvencH264Encoder()
    names = [p.name for p in encoder.presets()]
    assert names == ["p1", "p2", "p3", "p4", "p5", "p6", "p7"]
    assert encoder.current_preset().name == "p4"
    encoder.set_preset(encoder.presets()[6])
    assert encoder.current_preset().description == "Slowest"
    encoder.preset = "bogus"
    assert encoder.current_preset().name == "p4"


def test_cbr_command_args():
    args = NvencH264Encoder().command_args()
    assert args[0] == "ffmpeg"
    assert _value_after(args, "-c:v") == "h264_nvenc"
    assert _value_after(args, "-tune") == "ll"
    assert _value_after(args, "-rc") == "cbr"
    assert _value_after(args, "-b:v") == "6000k"
    assert _value_after(args, "-maxrate") == "6000k"
    assert _value_after(args, "-gpu") == "0"
    assert _value_after(args, "-g") == "60"
    assert _value_after(args, "-keyint_min") == "2"
    assert args[-1] == "-"


def test_vbr_and_cqp_command_args():
    encoder = NvencH264Encoder()
    encoder.set_parameter("rate_control", PropertyValue(PropertyType.ENUM, "VBR"))
    vbr = encoder.command_args()
    assert _value_after(vbr, "-rc") == "vbr"
    assert "-maxrate" not in vbr
    encoder.set_parameter("rate_control", PropertyValue(PropertyType.ENUM, "CQP"))
    cqp = encoder.command_args()
    assert _value_after(cqp, "-rc") == "constqp"
    assert _value_after(cqp, "-cq") == "23"
    assert "-b:v" not in cqp


def test_crf_adds_no_rate_control_flags():
    encoder = NvencH264Encoder()
    encoder.rate_control = RateControlMode.CRF
    args = encoder.command_args()
    assert "-rc" not in args
    assert "-b:v" not in args


def test_unknown_rate_control_falls_back_to_cbr():
    encoder = NvencH264Encoder()
    encoder.set_parameter("rate_control", PropertyValue(PropertyType.ENUM, "CRF"))
    assert encoder.rate_control is RateControlMode.CBR


def test_set_parameters_round_trip():
    encoder = NvencH264Encoder()
    encoder.set_parameter("bitrate", PropertyValue(PropertyType.INT, 3500))
    encoder.set_parameter("gpu", PropertyValue(PropertyType.INT, 3))
    encoder.set_parameter("profile", PropertyValue(PropertyType.ENUM, "main"))
    assert encoder.get_parameter("bitrate").value == 3500
    assert encoder.get_parameter("gpu").value == 3
    assert encoder.get_parameter("profile").value == "main"
    assert _value_after(encoder.command_args(), "-gpu") == "3"


def test_wrong_kind_is_ignored():
    encoder = NvencH264Encoder()
    encoder.set_parameter("bitrate", PropertyValue(PropertyType.STRING, "fast"))
    assert encoder.bitrate == 6000


def test_parameter_definitions():
    names = [d.name for d in NvencH264Encoder().parameters_definition()]
    assert names == ["bitrate", "keyint", "rate_control", "profile", "gpu"]


def test_is_available_detects_nvenc():
    with mock.patch("subprocess.run", return_value=_completed(b" V..... h264_nvenc NVIDIA")):
        assert NvencH264Encoder.is_available() is True
        assert NvencH264Encoder.gpu_count() == 1
    with mock.patch("subprocess.run", return_value=_completed(b" V..... libx264")):
        assert NvencH264Encoder.is_available() is False
        assert NvencH264Encoder.gpu_count() == 0


def test_is_available_without_ffmpeg():
    with mock.patch("subprocess.run", side_effect=OSError("missing")):
        assert NvencH264Encoder.is_available() is False


@pytest.mark.asyncio
async def test_encode_before_initialize_returns_none():
    encoder = NvencH264Encoder()
    frame = VideoFrame.blank(2, 2, PixelFormat.NV12)
    assert await encoder.encode(frame) is None
    assert encoder.frame_count == 0


@pytest.mark.asyncio
async def test_flush_without_process():
    encoder = NvencH264Encoder()
    assert await encoder.flush() == []
    assert encoder.initialized is False


def test_factory_function():
    encoder = create_nvenc_h264_encoder()
    assert isinstance(encoder, NvencH264Encoder)
    assert encoder.preset == "p4"