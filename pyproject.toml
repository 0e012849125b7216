[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kbroker"
version = "0.1.0"
description = "Key broker service building blocks and an administrative command line client"
requires-python = ">=3.10"
keywords = ["attestation", "key broker", "confidential computing", "jwe", "secrets"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "cryptography",
    "pyjwt",
    "httpx",
    "semver",
]

[project.optional-dependencies]
test = [
    "pytest",
    "respx",
]

[project.scripts]
kbroker = "kbroker.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kbroker"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
