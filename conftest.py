"""Shared fixtures for servermock tests."""

pytest_plugins = ["servermock.pytest_plugin"]
