[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aigateway"
version = "0.1.0"
description = "Client layer for OpenAI-compatible and Gemini LLM providers, with request conversion, SSE streaming, retries, quotas and rate limiting"
requires-python = ">=3.10"
dependencies = [
    "httpx",
]
keywords = ["llm", "openai", "gemini", "gateway", "sse", "rate-limiting", "quota"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["aigateway"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
