[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "respotcore"
version = "0.1.0"
description = "Core building blocks for a streaming music client: identifiers, credentials, key exchange, channels, audio keys and chunked audio fetching"
requires-python = ">=3.10"
keywords = ["audio", "streaming", "music", "protocol", "client"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["respotcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
