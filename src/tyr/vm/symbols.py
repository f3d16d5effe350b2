"""
Symbol table used to resolve jump targets.

The parser owns the table while a program loads; once loading finishes the
table is frozen and the VM only reads from it.
"""
from typing import Dict, Iterator, Optional, Tuple


class SymbolTable:
    """Maps a label name to the program address it was declared at."""

    def __init__(self):
        self._table: Dict[str, int] = {}
        self._frozen = False

    def insert(self, key: str, address: int):
        """Record a label. Duplicate checks are the caller's job (see ``is_duplicate``)."""
        if self._frozen:
            raise RuntimeError(f"symbol table is frozen; cannot insert label '{key}'")
        self._table[key] = address

    def get(self, key: str) -> Optional[int]:
        return self._table.get(key)

    def is_duplicate(self, key: str) -> bool:
        return key in self._table

    def freeze(self) -> "SymbolTable":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(self._table.items())

    def __contains__(self, key) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self):
        state = "frozen" if self._frozen else "open"
        return f"SymbolTable({len(self._table)} labels, {state})"
