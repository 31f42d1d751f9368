"""Mock server bootstrap domain exports."""

from .mock_server_bootstrap import BootstrapError, bootstrap_mock_server_environment

__all__ = ["BootstrapError", "bootstrap_mock_server_environment"]
