"""
Test helper utilities for xedeadlock testing.

This module provides reusable utilities for:
- Building synthetic deadlock report events
- Writing trace files in the supported layouts
"""
