import pytest

from imageform.config.settings import load_config


class RecordingGenerator:
    """Image capability stub that records calls and returns or raises a preset outcome."""

    def __init__(self, result=b"\x89PNG fake image", error=None):
        self.result = result
        self.error = error
        self.calls = []

    def __call__(self, prompt, model_path, size, num_steps):
        self.calls.append((prompt, model_path, size, num_steps))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def config():
    return load_config({
        "CF_ACCOUNT_ID": "acct-123",
        "CF_API_TOKEN": "token-abc",
    })


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def valid_fields():
    return {
        "prompt": "a red fox in the snow",
        "enhance": "false",
        "model": "FLUX.1-Schnell-CF",
        "size": "1024x1024",
        "numSteps": "4",
    }
