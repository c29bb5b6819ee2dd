"""Tests for command-line tools."""
