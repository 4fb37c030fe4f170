"""
Accepted origin codes.

Each archive entry carries a class field selecting which table its source
code is checked against. Codes outside the selected table are not archive
products of interest and are skipped without error.
"""

from bisect import bisect_left

IMAGE_ORIGINS: tuple[int, ...] = (0x33, 0x34, 0x37, 0x38, 0x42, 0x43, 0x44, 0x45, 0x46, 0x47)
SCIENCE_ORIGINS: tuple[int, ...] = (0x35, 0x36, 0x39, 0x40, 0x41, 0x51)

# class field -> table name
CLASS_TABLES = {
    "1": "image",
    "2": "image",
    "3": "science",
}


class OriginTable:
    """
    Two disjoint, sorted sets of accepted origin codes.

    Args:
        image: Codes accepted for image-class entries
        science: Codes accepted for science-class entries

    Raises:
        ValueError: If a code appears in both tables
    """

    def __init__(
        self,
        image: tuple[int, ...] | list[int] = IMAGE_ORIGINS,
        science: tuple[int, ...] | list[int] = SCIENCE_ORIGINS,
    ):
        overlap = set(image) & set(science)
        if overlap:
            codes = ", ".join(f"0x{code:02x}" for code in sorted(overlap))
            raise ValueError(f"origin codes listed as both image and science: {codes}")
        self.image = sorted(set(image))
        self.science = sorted(set(science))

    def lookup(self, class_field: str) -> list[int]:
        """Table selected by a class field, empty for unknown classes."""
        name = CLASS_TABLES.get(class_field)
        if name == "image":
            return self.image
        if name == "science":
            return self.science
        return []

    def accepts(self, class_field: str, code: int) -> bool:
        origins = self.lookup(class_field)
        if not origins:
            return False
        ix = bisect_left(origins, code)
        return ix < len(origins) and origins[ix] == code

    def __repr__(self) -> str:
        return f"OriginTable(image={self.image}, science={self.science})"


DEFAULT_ORIGINS = OriginTable()
