import pytest

from lineup_efficiency.config_manager import ConfigManager, set_config_manager
from lineup_efficiency.metrics import get_metrics_collector


@pytest.fixture
def config_manager():
    """Default configuration without file watching, restored afterwards."""
    manager = ConfigManager(enable_hot_reload=False)
    set_config_manager(manager)
    yield manager
    set_config_manager(None)


@pytest.fixture
def metrics():
    collector = get_metrics_collector()
    collector.reset()
    yield collector
    collector.reset()
