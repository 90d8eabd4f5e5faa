[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gothicframework"
version = "0.1.0"
description = "Command-line toolkit for scaffolding, building, hot-reloading and deploying Gothic web apps."
requires-python = ">=3.10"
keywords = ["templ", "tailwind", "htmx", "aws", "sam", "scaffolding", "hot-reload", "file-based-routing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "pillow",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gothicframework = "gothicframework.main:main"

[tool.hatch.build.targets.wheel]
packages = ["gothicframework"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
