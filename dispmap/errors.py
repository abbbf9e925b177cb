"""Error types raised by loaders, config parsing and the animation driver."""


class DispmapError(Exception):
    """Base class for all dispmap errors."""


class LoadError(DispmapError):
    """An input image is missing or cannot be decoded."""


class FormatError(DispmapError):
    """An image has the wrong channel count or incompatible dimensions."""


class ParameterError(DispmapError):
    """A channel selector or numeric parameter is out of range."""
