[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bupcat"
version = "0.1.0"
description = "Game core for a side-scrolling platformer: schema serialization, network packets, text markup rendering, camera, input and entity behaviours."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "platformer", "serialization", "networking", "bitmap-font"]
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
    "Topic :: Games/Entertainment :: Side-Scrolling/Arcade Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bupcat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
