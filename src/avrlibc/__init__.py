"""avrlibc-build - builds avr-libc and generates Rust bindings for it."""

__version__ = "0.1.0"
