"""
Utility functions for robo-web-test-kit
"""

from .RoboHelper import (
    load_test_data,
    get_env,
    extract_test_description,
    format_summary_lines,
)

__all__ = [
    "load_test_data",
    "get_env",
    "extract_test_description",
    "format_summary_lines",
]
