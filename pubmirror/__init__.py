"""Publish a monorepo's packages in dependency order and mirror them downstream."""

__version__ = "0.1.0"
