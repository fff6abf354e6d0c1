"""Test helpers for building Aseprite byte buffers."""
