"""Order directory abstraction — read access to orders owned elsewhere."""

import os

from payflow.order.port import OrderDirectory

_directory_instance: OrderDirectory | None = None


def get_order_directory() -> OrderDirectory:
    """Return the configured order directory (singleton).

    Uses InMemoryOrderDirectory by default. Configure via the
    ORDER_DIRECTORY_ADAPTER environment variable.
    """
    global _directory_instance
    if _directory_instance is None:
        adapter = os.environ.get("ORDER_DIRECTORY_ADAPTER", "memory")
        if adapter == "memory":
            from payflow.order.fake_adapter import InMemoryOrderDirectory

            _directory_instance = InMemoryOrderDirectory()
        else:
            raise ValueError(f"Unknown order directory adapter: {adapter}")
    return _directory_instance


def set_order_directory(directory: OrderDirectory) -> None:
    """Override the active order directory (useful for tests)."""
    global _directory_instance
    _directory_instance = directory


def reset_order_directory() -> None:
    """Reset the order directory singleton (useful for testing)."""
    global _directory_instance
    _directory_instance = None
