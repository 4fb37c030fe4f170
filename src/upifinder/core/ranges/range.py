"""
Range model: a closed interval of sequence numbers.
"""

from pydantic import BaseModel, model_validator


class Range(BaseModel):
    """
    Closed interval [first, last] over sequence numbers.

    Used both for observed runs (both bounds present) and for missing
    intervals between two runs (bounds present, interior missing).
    """

    first: int
    last: int

    @model_validator(mode="after")
    def check_bounds(self):
        """Validate that first <= last."""
        if self.first > self.last:
            raise ValueError(f"first ({self.first}) must not exceed last ({self.last})")
        return self

    @property
    def count(self) -> int:
        return self.last - self.first + 1

    def has(self, value: int) -> bool:
        return self.first <= value <= self.last

    def __str__(self) -> str:
        return f"[{self.first}, {self.last}]"

    class Config:
        frozen = True
