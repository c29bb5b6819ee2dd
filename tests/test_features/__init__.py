"""
Test suite for the temporal feature store module.
"""
