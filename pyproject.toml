[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mlsping"
version = "0.1.0"
description = "ICMP echo prober that modulates payload sizes with maximum-length sequences and records round-trip times"
requires-python = ">=3.10"
dependencies = []
keywords = ["icmp", "ping", "rtt", "mls", "maximum-length-sequence", "lfsr", "aes", "network-measurement"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mlsping = "mlsping.prober:main"
mlsping-mls = "mlsping.mls:main"

[tool.hatch.build.targets.wheel]
packages = ["mlsping"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
