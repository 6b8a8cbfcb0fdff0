"""Software compositing of scenes: cropping, nearest-neighbour scaling and alpha blitting."""

from __future__ import annotations

from typing import Callable

from robs.core_types import PixelFormat, SourceId, VideoInfo
from robs.interfaces import VideoFrame, calculate_linesize
from robs.scene import Scene
from robs.scene_item import Crop, Scale

_PACKED_BYTES_PER_PIXEL = {
    PixelFormat.RGBA: 4,
    PixelFormat.BGRA: 4,
    PixelFormat.RGB24: 3,
    PixelFormat.BGR24: 3,
    PixelFormat.YUY2: 2,
    PixelFormat.UYVY: 2,
}

_BLENDABLE = (PixelFormat.RGBA, PixelFormat.BGRA)


def _frame_size(width: int, height: int, format: PixelFormat) -> int:
    return VideoInfo(width=width, height=height).frame_size_bytes(format)


def _new_frame(
    width: int, height: int, format: PixelFormat, pts: int = 0, duration: int = 0
) -> VideoFrame:
    """A zero-filled frame whose buffer holds every plane of the picture."""
    return VideoFrame(
        width,
        height,
        format,
        bytearray(_frame_size(width, height, format)),
        pts=pts,
        duration=duration,
        linesize=calculate_linesize(width, height, format),
    )


def _check_buffer(frame: VideoFrame) -> None:
    needed = _frame_size(frame.width, frame.height, frame.format)
    if len(frame.data) < needed:
        raise ValueError(
            f"{frame.format.name} frame of {frame.width}x{frame.height} needs "
            f"{needed} bytes, buffer holds {len(frame.data)}"
        )


def _copy_rows(
    src: bytearray,
    src_offset: int,
    src_stride: int,
    dst: bytearray,
    dst_offset: int,
    dst_stride: int,
    x_bytes: int,
    row_bytes: int,
    top_row: int,
    rows: int,
) -> None:
    """Copy a rectangular block of ``rows`` rows of ``row_bytes`` bytes."""
    if row_bytes <= 0:
        return
    for y in range(rows):
        start = src_offset + (top_row + y) * src_stride + x_bytes
        target = dst_offset + y * dst_stride
        dst[target : target + row_bytes] = src[start : start + row_bytes]


def _nearest(
    src: bytearray,
    src_offset: int,
    src_stride: int,
    src_width: int,
    src_height: int,
    dst: bytearray,
    dst_offset: int,
    dst_stride: int,
    dst_width: int,
    dst_height: int,
    bpp: int,
) -> None:
    """Nearest-neighbour resample of one plane of ``bpp``-byte pixels."""
    x_ratio = src_width / dst_width
    y_ratio = src_height / dst_height
    columns = [min(int(dx * x_ratio), src_width - 1) for dx in range(dst_width)]
    for dy in range(dst_height):
        sy = min(int(dy * y_ratio), src_height - 1)
        row_start = src_offset + sy * src_stride
        row = b"".join(
            bytes(src[row_start + sx * bpp : row_start + sx * bpp + bpp]) for sx in columns
        )
        target = dst_offset + dy * dst_stride
        dst[target : target + len(row)] = row


def blend_pixels(bottom, top) -> tuple[int, int, int, int]:
    """Composite ``top`` over ``bottom`` by ``top``'s alpha; the result is opaque."""
    alpha = top[3] / 255.0
    inverse = 1.0 - alpha
    return (
        int(top[0] * alpha + bottom[0] * inverse),
        int(top[1] * alpha + bottom[1] * inverse),
        int(top[2] * alpha + bottom[2] * inverse),
        255,
    )


def crop_frame(frame: VideoFrame, crop: Crop) -> VideoFrame:
    """Return a new frame holding the part of ``frame`` left after ``crop``.

    A crop that leaves nothing gives a blank 1x1 frame. Formats without a crop
    routine (I422, I444) come back as an unchanged copy.
    """
    width = crop.cropped_width(frame.width)
    height = crop.cropped_height(frame.height)
    if width == 0 or height == 0:
        return _new_frame(1, 1, frame.format)

    fmt = frame.format
    if fmt not in _PACKED_BYTES_PER_PIXEL and fmt not in (PixelFormat.NV12, PixelFormat.I420):
        return VideoFrame(
            frame.width,
            frame.height,
            fmt,
            bytearray(frame.data),
            pts=frame.pts,
            duration=frame.duration,
            linesize=list(frame.linesize),
        )

    _check_buffer(frame)
    result = _new_frame(width, height, fmt, frame.pts, frame.duration)
    src, dst = frame.data, result.data

    if fmt in _PACKED_BYTES_PER_PIXEL:
        bpp = _PACKED_BYTES_PER_PIXEL[fmt]
        _copy_rows(
            src, 0, frame.width * bpp, dst, 0, width * bpp,
            crop.left * bpp, width * bpp, crop.top, height,
        )
        return result

    src_luma = frame.width * frame.height
    dst_luma = width * height
    _copy_rows(src, 0, frame.width, dst, 0, width, crop.left, width, crop.top, height)

    if fmt is PixelFormat.NV12:
        # Interleaved UV pairs at half resolution, rows as wide as the luma plane.
        _copy_rows(
            src, src_luma, frame.width, dst, dst_luma, width,
            (crop.left // 2) * 2, (width // 2) * 2, crop.top // 2, height // 2,
        )
        return result

    src_chroma_stride = frame.width // 2
    dst_chroma_stride = width // 2
    src_chroma = src_chroma_stride * (frame.height // 2)
    dst_chroma = dst_chroma_stride * (height // 2)
    for plane in range(2):
        _copy_rows(
            src, src_luma + plane * src_chroma, src_chroma_stride,
            dst, dst_luma + plane * dst_chroma, dst_chroma_stride,
            crop.left // 2, width // 2, crop.top // 2, height // 2,
        )
    return result


def scale_frame(
    frame: VideoFrame, scale: Scale, target_width: int, target_height: int
) -> VideoFrame:
    """Resample ``frame`` to ``target_width`` x ``target_height`` by nearest neighbour.

    ``scale`` is accepted for symmetry with the item transform; the target size
    alone decides the result. Formats without a resampler get the overlapping
    top-left part of their first plane copied.
    """
    if target_width <= 0 or target_height <= 0:
        return _new_frame(1, 1, frame.format)

    result = _new_frame(target_width, target_height, frame.format, frame.pts, frame.duration)
    src_width, src_height = frame.width, frame.height
    if src_width == 0 or src_height == 0:
        return result
    _check_buffer(frame)

    fmt = frame.format
    src, dst = frame.data, result.data

    if fmt in _PACKED_BYTES_PER_PIXEL:
        bpp = _PACKED_BYTES_PER_PIXEL[fmt]
        _nearest(
            src, 0, src_width * bpp, src_width, src_height,
            dst, 0, target_width * bpp, target_width, target_height, bpp,
        )
    elif fmt is PixelFormat.NV12:
        _nearest(
            src, 0, src_width, src_width, src_height,
            dst, 0, target_width, target_width, target_height, 1,
        )
        src_uv_width, src_uv_height = src_width // 2, src_height // 2
        dst_uv_width, dst_uv_height = target_width // 2, target_height // 2
        if src_uv_width and src_uv_height and dst_uv_width and dst_uv_height:
            _nearest(
                src, src_width * src_height, src_width, src_uv_width, src_uv_height,
                dst, target_width * target_height, target_width, dst_uv_width, dst_uv_height, 2,
            )
    else:
        bpp = fmt.bytes_per_pixel()
        _copy_rows(
            src, 0, src_width * bpp, dst, 0, target_width * bpp,
            0, min(target_width, src_width) * bpp, 0, min(target_height, src_height),
        )
    return result


def _blit(picture: VideoFrame, output: VideoFrame, dst_x: int, dst_y: int) -> None:
    src_stride = picture.width * 4
    dst_stride = output.width * 4
    first_x = max(0, -dst_x)
    last_x = min(picture.width, output.width - dst_x)
    for sy in range(picture.height):
        dy = dst_y + sy
        if dy < 0 or dy >= output.height:
            continue
        for sx in range(first_x, last_x):
            src_index = sy * src_stride + sx * 4
            top = picture.data[src_index : src_index + 4]
            if top[3] == 0:
                continue
            dst_index = dy * dst_stride + (dst_x + sx) * 4
            bottom = output.data[dst_index : dst_index + 4]
            output.data[dst_index : dst_index + 4] = bytes(blend_pixels(bottom, top))


def render_scene(
    scene: Scene,
    get_frame: Callable[[SourceId], VideoFrame | None],
    output: VideoFrame,
) -> None:
    """Draw every visible item of ``scene`` into ``output``, bottom layer first.

    ``output`` is first cleared to the scene's background colour (RGBA/BGRA) or
    to zeros. Items are cropped, scaled and alpha-blended at their position;
    only RGBA onto RGBA and BGRA onto BGRA are blended, other pairs are skipped.
    """
    if output.format in _BLENDABLE:
        pixels = len(output.data) // 4
        output.data[: pixels * 4] = bytes(scene.background_color) * pixels
    else:
        output.data[:] = bytes(len(output.data))

    for item in scene.items:
        if not item.visible:
            continue
        source_frame = get_frame(item.source_id)
        if source_frame is None:
            continue

        cropped = crop_frame(source_frame, item.crop)
        scale = item.scale
        target_width = int(cropped.width * scale.x)
        target_height = int(cropped.height * scale.y)
        if target_width <= 0 or target_height <= 0:
            continue

        scaled = scale_frame(cropped, scale, target_width, target_height)
        if output.format is not scaled.format or output.format not in _BLENDABLE:
            continue

        position = item.position
        _blit(scaled, output, int(position.x), int(position.y))