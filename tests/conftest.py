from unittest.mock import AsyncMock, patch

import pytest

from factories import RecordingClient, make_analysis


@pytest.fixture
def analysis():
    return make_analysis()


@pytest.fixture
def mock_runner():
    """Patches the agent runner used by the generation client."""
    with patch("backend.generation.Runner.run", new_callable=AsyncMock) as run:
        yield run


@pytest.fixture
def recording_client():
    return RecordingClient()
