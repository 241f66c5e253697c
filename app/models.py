from dataclasses import dataclass, field

@dataclass
class EntryFailure:
    index: int
    file_name: str | None
    reason: str  # "malformed_entry", "unreadable_image" など

@dataclass
class BatchResult:
    total: int
    attempted: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    elapsed: float = 0.0
    workers: int = 1
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.attempted == self.total
