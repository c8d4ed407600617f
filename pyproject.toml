[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kaotonamae"
version = "0.1.0"
description = "HTTP backend for a face-and-name quiz app: users, profiles, groups, friends and generated quizzes"
requires-python = ">=3.10"
keywords = ["quiz", "rest", "flask", "sqlalchemy", "groups", "friends"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Natural Language :: Japanese",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.2",
    "sqlalchemy>=2.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
kaotonamae = "kaotonamae.app:main"

[tool.hatch.build.targets.wheel]
packages = ["kaotonamae"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
