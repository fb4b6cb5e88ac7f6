from __future__ import annotations

from typing import Literal

CadenceErrorKind = Literal["cron", "rule"]


class CadenceError(Exception):
    kind: CadenceErrorKind
    field: str | None
    value: object | None

    def __init__(
        self,
        kind: CadenceErrorKind,
        message: str,
        field: str | None = None,
        value: object | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.value = value

    @classmethod
    def cron(cls, message: str, field: str | None = None, value: object | None = None) -> CadenceError:
        return cls("cron", message, field, value)

    @classmethod
    def rule(cls, message: str, field: str | None = None, value: object | None = None) -> CadenceError:
        return cls("rule", message, field, value)

    def display_rich(self) -> str:
        if self.field is not None:
            return f"error: {self} ({self.field}={self.value!r})"
        return f"error: {self}"
