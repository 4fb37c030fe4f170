"""
Scan errors.
"""


class TraversalError(Exception):
    """One archive root could not be traversed to the end."""

    def __init__(self, root: str, cause: BaseException):
        self.root = root
        self.cause = cause
        super().__init__(f"{root}: {cause}")


class ScanError(Exception):
    """
    Raised after a scan completed with failed roots.

    Every record of the roots that did complete has already been delivered
    when this is raised.

    Attributes:
        errors: One TraversalError per failed root, in completion order
    """

    def __init__(self, errors: list[TraversalError]):
        self.errors = list(errors)
        roots = ", ".join(error.root for error in self.errors)
        super().__init__(f"{len(self.errors)} root(s) failed: {roots}")

    @property
    def roots(self) -> list[str]:
        return [error.root for error in self.errors]
