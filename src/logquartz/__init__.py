"""Logquartz: publish a Logseq graph as a Quartz content folder."""

__version__ = "0.1.0"
