[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmsgateway"
version = "0.1.0"
description = "Support library for Winlink RMS packet radio gateways: configuration, CMS hosts, channels and secure gateway login"
requires-python = ">=3.10"
dependencies = []
keywords = ["winlink", "rms", "gateway", "ax25", "packet radio", "ham radio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rmsgw-chantest = "rmsgateway.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rmsgateway"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
