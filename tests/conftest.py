import pytest

from sealedpipe.config import TransportConfig

from helpers import start_server


@pytest.fixture
def echo_server():
    listener = start_server(TransportConfig(timeout=5))
    yield listener.getsockname()[1]
    listener.close()
