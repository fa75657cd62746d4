[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "serialscope"
version = "0.1.0"
description = "Plot models, value formatting and CSV export for serial-line oscilloscope data"
requires-python = ">=3.10"
dependencies = []
keywords = ["oscilloscope", "serial", "plotting", "csv", "si-prefix", "fft"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["serialscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
