[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relicfs"
version = "0.1.0"
description = "Filesystem toolkits: hex-to-image conversion, a split-file relic store, a name-reversing rot13 view and a multi-area transforming store"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "filesystem",
    "rot13",
    "aes",
    "zlib",
    "hex",
    "chunked-storage",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
relicfs-hexed = "relicfs.hexed:main"
relicfs-baymax = "relicfs.baymax:main"
relicfs-antink = "relicfs.antink:main"
relicfs-maimai = "relicfs.maimai:main"

[tool.hatch.build.targets.wheel]
packages = ["relicfs"]

[tool.hatch.build.targets.sdist]
include = ["relicfs", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
