"""Shared test helpers: fake native library and Standard JSON inputs."""
