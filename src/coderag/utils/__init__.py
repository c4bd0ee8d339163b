"""Utility functions for coderag."""

from coderag.utils.binary import detect_binary, is_binary_content, is_binary_extension

__all__ = ["detect_binary", "is_binary_content", "is_binary_extension"]
