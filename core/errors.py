"""Exception types for tiempo application."""


class LexiconError(ValueError):
    """Raised when the static lexicon cannot produce coherent draws."""


class ExternalScorerError(RuntimeError):
    """Raised by external scorers on transport or response failures."""

    def __init__(self, message: str, source: str = None):
        super().__init__(message)
        self.source = source
