"""Exceptions raised by the WBS builder."""


class WbsBuilderError(Exception):
    """Base class for WBS builder errors."""


class InputShapeError(WbsBuilderError, ValueError):
    """
    Raised when a required input is missing or has the wrong shape.

    Missing or empty equipment lists and a missing existing WBS tree are
    fatal: nothing is partially processed.
    """


class UnsupportedFormatError(WbsBuilderError, ValueError):
    """Raised when a file format is not supported by an extractor or loader."""

    def __init__(self, fmt: str, supported):
        self.format = fmt
        self.supported = list(supported)
        super().__init__(
            f"Unsupported format '{fmt}'. Supported: {', '.join(self.supported)}"
        )
