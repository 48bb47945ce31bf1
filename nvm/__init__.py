"""A small 16-bit x86-style virtual machine: registers, memory, decoding, execution and a runner command."""

__version__ = "0.1.0"