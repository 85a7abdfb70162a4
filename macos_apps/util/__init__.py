"""Utility module for macos-apps."""

from .shell import ShellResult, run
from .image import encode_png, encode_png_data_uri, to_data_uri

__all__ = ["ShellResult", "run", "encode_png", "encode_png_data_uri", "to_data_uri"]
