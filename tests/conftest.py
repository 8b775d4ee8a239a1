import pytest

from geminirelay.app import create_app
from geminirelay.config import Settings
from helpers import RecordingWriter, mock_client


@pytest.fixture
def settings():
    """Settings pointing at fake upstream hosts."""
    return Settings(
        gemini_api_key="test-gemini-key",
        gemini_model="gemini-test",
        gemini_api_url="http://gemini.test/v1beta",
        openai_api_key="",
        openai_api_url="http://openai.test/v1",
        log_level="DEBUG",
    )


@pytest.fixture
def writer():
    return RecordingWriter()


@pytest.fixture
def make_app(settings):
    """Build the app with an upstream client served by ``handler``."""

    def _make(handler=None):
        def unexpected(request):
            raise AssertionError(f"unexpected upstream call: {request.url}")

        app = create_app(settings)
        app.state.http_client = mock_client(handler or unexpected)
        return app

    return _make
