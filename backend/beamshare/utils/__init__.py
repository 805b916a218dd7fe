"""Filesystem, network and formatting helpers."""
