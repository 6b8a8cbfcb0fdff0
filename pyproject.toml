[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robs"
version = "0.1.0"
description = "Building blocks for a live streaming and recording studio: scenes, compositing, ffmpeg encoders and outputs"
requires-python = ">=3.10"
dependencies = []
keywords = ["streaming", "recording", "ffmpeg", "rtmp", "scene", "compositing", "encoder"]
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
    "Topic :: Multimedia :: Video",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["robs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
