from array import array

import pytest

from robs.audio_mixer import AudioMixer
from robs.core_types import AudioFormat, AudioSpeaker
from robs.interfaces import AudioFrame

STEREO = (AudioSpeaker.FL, AudioSpeaker.FR)


def f32_frame(samples, channels=2):
    return AudioFrame(
        sample_rate=48000,
        format=AudioFormat.F32,
        speakers=STEREO[:channels],
        data=bytearray(array("f", samples).tobytes()),
        frames=len(samples) // channels,
    )


def samples_of(frame):
    values = array("f")
    values.frombytes(bytes(frame.data))
    return list(values)


def test_single_input_passes_through():
    source = [0.5, -0.25, 0.125, 0.0]
    result = AudioMixer(48000, 2).mix([f32_frame(source)], 2)
    assert samples_of(result) == source


def test_output_frame_description():
    result = AudioMixer(44100, 2).mix([], 3)
    assert result.frames == 3
    assert result.sample_rate == 44100
    assert result.format is AudioFormat.F32
    assert result.speakers == STEREO
    assert samples_of(result) == [0.0] * 6


def test_inputs_are_summed():
    result = AudioMixer().mix([f32_frame([0.25, 0.5]), f32_frame([0.5, -0.5])], 1)
    assert samples_of(result) == pytest.approx([0.75, 0.0])


def test_clipping_sum_is_normalised():
    first = f32_frame([0.75, 0.5, -0.25, 0.25])
    second = f32_frame([0.75, 0.5, -0.25, 0.25])
    out = samples_of(AudioMixer().mix([first, second], 2))
    assert max(abs(s) for s in out) == pytest.approx(1.0)
    assert out[1] / out[0] == pytest.approx(0.5 / 0.75)
    assert out[2] / out[0] == pytest.approx(-0.25 / 0.75)


def test_longer_input_is_truncated_to_output_length():
    result = AudioMixer().mix([f32_frame([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])], 1)
    assert len(samples_of(result)) == 2
    assert samples_of(result) == pytest.approx([0.1, 0.2])


def test_shorter_input_leaves_silence():
    result = AudioMixer().mix([f32_frame([0.5, 0.5])], 3)
    out = samples_of(result)
    assert out[:2] == [0.5, 0.5]
    assert out[2:] == [0.0] * 4