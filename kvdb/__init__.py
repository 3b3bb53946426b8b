"""
kvdb Module

Configuration and command-line interface.

This module provides:
- YAML and environment based configuration
- The ``kvdb`` command with set/get/del/ts actions
"""

__version__ = "0.1.0"
