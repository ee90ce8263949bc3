[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "helium"
version = "0.1.0"
description = "Connection and client state machine for the Helium VPN protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["vpn", "tunnel", "dtls", "tls", "protocol", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["helium"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
