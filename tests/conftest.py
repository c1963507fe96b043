import pytest

from tests.signals import SAMPLE_RATE, gen_fade_music_like, gen_noise, gen_silence, gen_sine


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


@pytest.fixture
def silence():
    return gen_silence()


@pytest.fixture
def sine():
    return gen_sine()


@pytest.fixture
def noise():
    return gen_noise()


@pytest.fixture
def fade():
    return gen_fade_music_like()
