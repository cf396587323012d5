"""Bitlayout - ABI-exact bit-field struct layout for C-to-Rust translation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bitlayout")
except PackageNotFoundError:
    __version__ = "(local)"
