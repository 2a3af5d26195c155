"""Compile a tree of TOML and Markdown specs into deterministic JSON artifacts."""

__version__ = "0.1.0"
