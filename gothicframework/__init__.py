"""Tools for scaffolding, building, hot-reloading and deploying Gothic web apps."""

__version__ = "0.1.0"