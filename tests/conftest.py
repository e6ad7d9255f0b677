import pytest
from minitranspile.registry import clear_registry


@pytest.fixture(autouse=True)
def _reset_registry():  # pyright: ignore[reportUnusedFunction]
	clear_registry()
	yield
	clear_registry()
