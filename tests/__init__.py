"""
Test suite for the odtfill project.

This module contains all unit and integration tests for the odtfill package.
"""
