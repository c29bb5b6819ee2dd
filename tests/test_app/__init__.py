"""Tests for shared utilities and configuration."""
