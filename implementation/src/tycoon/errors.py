from __future__ import annotations


class UnknownDefinitionError(KeyError):
    """A definition id that is not present in the static content tables.

    Only raised for programming errors: action entry points check
    user-supplied ids before looking definitions up.
    """

    def __init__(self, table: str, def_id: str) -> None:
        super().__init__(f"unknown {table} id: {def_id!r}")
        self.table = table
        self.def_id = def_id
