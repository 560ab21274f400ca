import pytest

from controls.action_sink import RecordingActionSink
from gestures.config import EngineConfig
from gestures.types import GestureObservation
from utils.action_coordinator import ActionCoordinator


def obs(name, detected=True, confidence=1.0, progress=None):
    return GestureObservation(str(name), detected=detected, confidence=confidence, progress=progress)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def sink():
    return RecordingActionSink()


@pytest.fixture
def coordinator(sink, config):
    return ActionCoordinator(sink, config=config)
