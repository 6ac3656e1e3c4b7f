class ECFGError(Exception):
    """Base class of every error raised by the checker."""


class ValidationError(ECFGError, ValueError):
    """The grammar description is malformed. Raised while constructing."""


class QueryError(ECFGError, KeyError):
    """A query names a symbol the grammar does not declare."""

    def __str__(self) -> str:
        # KeyError quotes its argument
        return str(self.args[0]) if self.args else ""
