# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for wipeout.

This module collects the foundational classes, utilities, and helpers used
across the wipeout codebase: configuration, error handling, structured
logging, and helpers for running commands over many workspaces.
"""
