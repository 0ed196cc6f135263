[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nmxact"
version = "0.1.0"
description = "Newtmgr management protocol building blocks: NMP and CoAP messages, dispatchers, serial framing and BLE helpers"
requires-python = ">=3.10"
keywords = ["newtmgr", "nmp", "coap", "cbor", "embedded", "ble", "serial"]
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
    "Topic :: Software Development :: Embedded Systems",
]
dependencies = [
    "cbor2",
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["nmxact"]

[tool.pytest.ini_options]
addopts = "-ra"
