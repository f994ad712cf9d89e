"""boilergen -- add React, React Native and Express boilerplate to existing projects."""

__version__ = "0.1.0"


class BoilergenError(Exception):
    """Base class for errors raised by boilergen."""
