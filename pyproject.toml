[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "boardcam"
version = "0.1.0"
description = "Camera-based chessboard recognition: marker detection, piece classification and move notation"
requires-python = ">=3.10"
keywords = ["chess", "camera", "image recognition", "board detection", "notation", "i2c", "sccb"]
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
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Games/Entertainment :: Board Games",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["boardcam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
