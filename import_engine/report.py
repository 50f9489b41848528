"""
import_engine.report - Structured results of import and duplicate checks.

Both are frozen: built once at the end of a call, never mutated after.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from import_engine.errors import ErrorKind


@dataclass(frozen=True)
class ImportErrorDetail:
    row: int                                      # 1-based source line
    message: str
    key: dict = field(default_factory=dict)       # natural-key echo
    kind: ErrorKind = ErrorKind.VALIDATION_FAILED

    def to_dict(self) -> dict:
        return {"row": self.row, **self.key,
                "message": self.message, "kind": self.kind.value}


@dataclass(frozen=True)
class ImportResult:
    import_id: str
    stock_code: str
    stock_name: str
    total_rows: int = 0
    success_count: int = 0
    skip_count: int = 0
    error_count: int = 0
    errors: tuple[ImportErrorDetail, ...] = ()
    imported_at: str = ""

    @property
    def status(self) -> str:
        """completed / partial / failed."""
        if not self.error_count:
            return "completed"
        if self.success_count or self.skip_count:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "import_id": self.import_id,
            "stock_code": self.stock_code,
            "stock_name": self.stock_name,
            "total_rows": self.total_rows,
            "success_count": self.success_count,
            "skip_count": self.skip_count,
            "error_count": self.error_count,
            "errors": [e.to_dict() for e in self.errors],
            "imported_at": self.imported_at,
            "status": self.status,
        }


@dataclass(frozen=True)
class DuplicateCheckResult:
    total_news: int
    duplicate_count: int
    duplicates: tuple[dict, ...] = ()   # [{published_at, title, existing_news_id}]

    def to_dict(self) -> dict:
        return {
            "total_news": self.total_news,
            "duplicate_count": self.duplicate_count,
            "duplicates": list(self.duplicates),
        }
