import array

import numpy as np
import pytest
from pydub import AudioSegment

from loudness_engine.exceptions import InvalidInputError
from loudness_engine.signal import MultichannelSignal, as_channel_array


def test_channel_list():
    signal = MultichannelSignal(channels=[[0.0, 0.5, 1.0], [0.0, -0.5, -1.0]], sample_rate=8000)
    assert signal.channels.shape == (2, 3)
    assert signal.num_channels == 2
    assert signal.num_samples == 3
    assert signal.duration == pytest.approx(3 / 8000)


def test_mono_array():
    assert as_channel_array(np.zeros(10)).shape == (1, 10)
    assert as_channel_array([0.1, 0.2, 0.3]).shape == (1, 3)


def test_copies_caller_data():
    data = np.zeros((2, 4))
    signal = MultichannelSignal(channels=data, sample_rate=8000)
    data[0, 0] = 1.0
    assert signal.channels[0, 0] == 0.0


def test_mismatched_lengths_raise():
    with pytest.raises(InvalidInputError):
        as_channel_array([np.zeros(4), np.zeros(5)])


def test_no_channels_raise():
    with pytest.raises(InvalidInputError):
        as_channel_array([])
    with pytest.raises(InvalidInputError):
        as_channel_array(np.zeros((0, 10)))


def test_three_dimensional_input_raises():
    with pytest.raises(InvalidInputError):
        as_channel_array(np.zeros((2, 2, 2)))


def test_from_audiosegment():
    # Interleaved 16-bit stereo frames: (L, R) = (0.5, -0.5), (0.25, 0.0)
    samples = array.array("h", [16384, -16384, 8192, 0])
    audio = AudioSegment(data=samples.tobytes(), sample_width=2, frame_rate=44100, channels=2)

    signal = MultichannelSignal.from_audiosegment(audio)

    assert signal.sample_rate == 44100
    assert signal.channels.tolist() == [[0.5, 0.25], [-0.5, 0.0]]


def test_from_audiosegment_rejects_none():
    with pytest.raises(InvalidInputError):
        MultichannelSignal.from_audiosegment(None)
