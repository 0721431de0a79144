class InputFormatError(ValueError):
    """The input file cannot be parsed or lacks an expected column."""


class DataIntegrityError(ValueError):
    """The data parsed but is inconsistent (unlabeled rows, empty vocabulary)."""
