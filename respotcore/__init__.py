"""Core building blocks for a streaming music client: ids, credentials, keys, channels and audio fetching."""

__version__ = "0.1.0"