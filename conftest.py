import pytest

from charmi_config import CharmiSystemConfig, reload_config
from charmi_width import clear_default_cache


@pytest.fixture(autouse=True)
def default_config():
    """Start every test from the built-in configuration."""
    reload_config(CharmiSystemConfig())
    clear_default_cache()
    yield
    reload_config(CharmiSystemConfig())
