[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chiswire"
version = "0.1.0"
description = "A simple packet sniffer with a live packet list, display filter, protocol details and hex dump"
requires-python = ">=3.10"
dependencies = []
keywords = ["packet", "sniffer", "network", "capture", "ethernet", "tcp", "udp", "arp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
chiswire = "chiswire.app:main"

[tool.hatch.build.targets.wheel]
packages = ["chiswire"]

[tool.pytest.ini_options]
addopts = "-ra"
