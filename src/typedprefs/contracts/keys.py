"""Setting keys.

Keys are derived from method names and used as map keys by the classifier,
the consistency checker and the cache. They are always built through
``SettingKey.from_method_name`` so every comparison sees one canonical form.
"""

from dataclasses import dataclass


@dataclass(frozen=True, order=True, slots=True)
class SettingKey:
    """Persistence key of one logical setting."""

    name: str

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise ValueError(f"Setting key must be a Python identifier, got {self.name!r}")

    @classmethod
    def from_method_name(cls, method_name: str) -> "SettingKey":
        """Derive the key of a getter or putter; the name is used verbatim."""
        return cls(method_name)

    def __str__(self) -> str:
        return self.name
