[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ethproofs"
version = "0.1.0"
description = "Asyncio building blocks for a block proving service, plus clients that request proofs and collect the reports"
requires-python = ">=3.10"
keywords = ["ethereum", "proving", "scheduler", "websocket", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "aiohttp>=3.9",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
prove-block-by-number = "ethproofs.cli:prove_block_by_number_main"
prove-latest-block = "ethproofs.cli:prove_latest_block_main"
reproduce-block-by-number = "ethproofs.cli:reproduce_block_by_number_main"

[tool.hatch.build.targets.wheel]
packages = ["ethproofs"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
