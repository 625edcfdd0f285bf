"""Pytest configuration and shared fixtures."""
import pytest

from flatstate import FlatState
import flatstate.config as config_module


@pytest.fixture(autouse=True)
def restore_default_config():
    """Restore the process-wide default config after each test."""
    original = config_module._default_config

    yield

    config_module._default_config = original


@pytest.fixture
def values():
    """Provide the value sequence used throughout the tests."""
    return [11, 12, 13, 14, 15, 16]


@pytest.fixture
def state(values):
    """Provide a FlatState already holding ``values``."""
    state = FlatState()
    state.set_values(values)
    return state


@pytest.fixture
def chunk_by_2():
    """Provide a transform grouping a slice into pairs."""
    def chunk(items):
        chunks = []
        for item in items:
            if not chunks or len(chunks[-1]) == 2:
                chunks.append([item])
            else:
                chunks[-1].append(item)
        return chunks
    return chunk
