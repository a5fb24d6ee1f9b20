[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vasily"
version = "0.1.0"
description = "Ping and traceroute building blocks: ICMP/UDP packet parsing, route tracing and heatmap colours"
requires-python = ">=3.10"
dependencies = []
keywords = ["ping", "traceroute", "icmp", "udp", "network", "monitoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
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

[tool.hatch.build.targets.wheel]
packages = ["vasily"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
