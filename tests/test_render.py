import pytest

from robs.core_types import PixelFormat, SourceId
from robs.interfaces import VideoFrame
from robs.render import blend_pixels, crop_frame, render_scene, scale_frame
from robs.scene import Scene
from robs.scene_item import Crop, Position, Scale


def solid_rgba(width, height, pixel):
    return VideoFrame(width, height, PixelFormat.RGBA, bytearray(bytes(pixel) * (width * height)))


def indexed(width, height, fmt, size):
    return VideoFrame(width, height, fmt, bytearray(i % 256 for i in range(size)), pts=7, duration=3)


def pixel(frame, x, y):
    start = (y * frame.width + x) * 4
    return bytes(frame.data[start : start + 4])


def test_blend_opaque_top_wins():
    assert blend_pixels((10, 20, 30, 255), (200, 150, 100, 255)) == (200, 150, 100, 255)


def test_blend_transparent_top_keeps_bottom_and_makes_opaque():
    assert blend_pixels((10, 20, 30, 40), (200, 150, 100, 0)) == (10, 20, 30, 255)


def test_blend_partial_alpha_lies_between():
    result = blend_pixels((0, 0, 0, 255), (200, 100, 50, 128))
    assert result[3] == 255
    assert 0 < result[0] < 200
    assert 0 < result[1] < 100


def test_crop_rgba_takes_inner_region():
    frame = indexed(4, 3, PixelFormat.RGBA, 4 * 3 * 4)
    result = crop_frame(frame, Crop(1, 1, 1, 0))
    assert (result.width, result.height) == (2, 2)
    assert pixel(result, 0, 0) == pixel(frame, 1, 1)
    assert pixel(result, 1, 1) == pixel(frame, 2, 2)
    assert (result.pts, result.duration) == (frame.pts, frame.duration)


def test_crop_to_nothing_gives_one_pixel():
    frame = indexed(4, 4, PixelFormat.RGBA, 64)
    result = crop_frame(frame, Crop(3, 0, 3, 0))
    assert (result.width, result.height) == (1, 1)


def test_crop_none_is_identity_for_rgb24():
    frame = indexed(3, 2, PixelFormat.RGB24, 18)
    result = crop_frame(frame, Crop.none())
    assert result.data == frame.data
    assert result is not frame


def test_crop_i420_planes():
    frame = indexed(4, 4, PixelFormat.I420, 24)
    result = crop_frame(frame, Crop(2, 2, 0, 0))
    assert (result.width, result.height) == (2, 2)
    assert list(result.data[:4]) == [frame.data[10], frame.data[11], frame.data[14], frame.data[15]]
    # U sample at chroma (1, 1): offset 16 + 1 * 2 + 1; V plane follows 4 bytes later.
    assert result.data[4] == frame.data[16 + 2 + 1]
    assert result.data[5] == frame.data[20 + 2 + 1]


def test_crop_nv12_keeps_uv_pairs():
    frame = indexed(4, 4, PixelFormat.NV12, 24)
    result = crop_frame(frame, Crop(2, 2, 0, 0))
    assert list(result.data[:4]) == [frame.data[10], frame.data[11], frame.data[14], frame.data[15]]
    assert list(result.data[4:6]) == [frame.data[16 + 4 + 2], frame.data[16 + 4 + 3]]


def test_crop_unsupported_format_is_unchanged_copy():
    frame = indexed(2, 2, PixelFormat.I444, 12)
    result = crop_frame(frame, Crop(1, 0, 0, 0))
    assert (result.width, result.height) == (2, 2)
    assert result.data == frame.data


def test_scale_up_repeats_pixels():
    frame = indexed(2, 2, PixelFormat.RGBA, 16)
    result = scale_frame(frame, Scale.uniform(2.0), 4, 4)
    assert (result.width, result.height) == (4, 4)
    for y in range(4):
        for x in range(4):
            assert pixel(result, x, y) == pixel(frame, x // 2, y // 2)


def test_scale_down_samples_even_pixels():
    frame = indexed(4, 4, PixelFormat.RGBA, 64)
    result = scale_frame(frame, Scale.uniform(0.5), 2, 2)
    for y in range(2):
        for x in range(2):
            assert pixel(result, x, y) == pixel(frame, x * 2, y * 2)


def test_scale_to_zero_gives_one_pixel():
    frame = indexed(2, 2, PixelFormat.RGBA, 16)
    result = scale_frame(frame, Scale.one(), 0, 5)
    assert (result.width, result.height) == (1, 1)


def test_scale_rejects_short_buffer():
    frame = VideoFrame(4, 4, PixelFormat.RGBA, bytearray(16))
    with pytest.raises(ValueError):
        scale_frame(frame, Scale.one(), 2, 2)


def _scene_with_item(frame_pixel, position, size=(2, 2)):
    scene = Scene("s", 4, 4)
    scene.background_color = (0, 0, 255, 255)
    source_id = SourceId()
    item_id = scene.add_source(source_id, "cam")
    scene.set_item_position(item_id, position)
    frames = {source_id: solid_rgba(size[0], size[1], frame_pixel)}
    return scene, item_id, frames.get


def test_render_places_item_over_background():
    red = (255, 0, 0, 255)
    scene, _, get_frame = _scene_with_item(red, Position(1.0, 1.0))
    output = solid_rgba(4, 4, (9, 9, 9, 9))
    render_scene(scene, get_frame, output)
    assert pixel(output, 0, 0) == bytes(scene.background_color)
    assert pixel(output, 1, 1) == bytes(red)
    assert pixel(output, 2, 2) == bytes(red)
    assert pixel(output, 3, 3) == bytes(scene.background_color)


def test_render_clips_at_edges():
    red = (255, 0, 0, 255)
    scene, _, get_frame = _scene_with_item(red, Position(-1.0, 3.0))
    output = solid_rgba(4, 4, (0, 0, 0, 0))
    render_scene(scene, get_frame, output)
    assert pixel(output, 0, 3) == bytes(red)
    assert pixel(output, 1, 3) == bytes(scene.background_color)


def test_render_skips_transparent_and_hidden_items():
    scene, item_id, get_frame = _scene_with_item((255, 0, 0, 0), Position.zero())
    output = solid_rgba(4, 4, (0, 0, 0, 0))
    render_scene(scene, get_frame, output)
    assert pixel(output, 0, 0) == bytes(scene.background_color)

    scene2, item2, get_frame2 = _scene_with_item((255, 0, 0, 255), Position.zero())
    scene2.set_item_visible(item2, False)
    render_scene(scene2, get_frame2, output)
    assert pixel(output, 0, 0) == bytes(scene2.background_color)


def test_render_ignores_missing_frames():
    scene, _, _ = _scene_with_item((255, 0, 0, 255), Position.zero())
    output = solid_rgba(4, 4, (1, 2, 3, 4))
    render_scene(scene, lambda source_id: None, output)
    assert all(pixel(output, x, y) == bytes(scene.background_color) for x in range(4) for y in range(4))


def test_render_applies_scale():
    green = (0, 255, 0, 255)
    scene, item_id, get_frame = _scene_with_item(green, Position.zero(), size=(1, 1))
    scene.set_item_scale(item_id, Scale.uniform(2.0))
    output = solid_rgba(4, 4, (0, 0, 0, 0))
    render_scene(scene, get_frame, output)
    assert {pixel(output, x, y) for x in range(2) for y in range(2)} == {bytes(green)}
    assert pixel(output, 2, 2) == bytes(scene.background_color)


def test_render_clears_non_rgba_output_to_zero():
    scene, _, get_frame = _scene_with_item((255, 0, 0, 255), Position.zero())
    output = VideoFrame(4, 4, PixelFormat.NV12, bytearray(b"\x07" * 24))
    render_scene(scene, get_frame, output)
    assert output.data == bytearray(24)