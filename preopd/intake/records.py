# preopd/intake/records.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from preopd.errors import UnknownCategoryError
from preopd.intake.masters import RECORD_CATEGORIES
from preopd.intake.schema import new_id


@dataclass(frozen=True)
class RecordFile:
    id: str
    name: str
    content_type: str
    size: int
    text: str

    def describe(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contentType": self.content_type,
            "size": self.size,
        }


@dataclass
class ExtractedRecords:
    """
    Text extracted from uploaded previous records, kept per file so that
    removing one upload only drops that file's text.
    """

    files: Dict[str, Dict[str, RecordFile]] = field(
        default_factory=lambda: {key: {} for key in RECORD_CATEGORIES}
    )

    def check_category(self, category: str) -> None:
        if category not in self.files:
            raise UnknownCategoryError(category)

    def _bucket(self, category: str) -> Dict[str, RecordFile]:
        self.check_category(category)
        return self.files[category]

    def add(
        self,
        category: str,
        name: str,
        content_type: str,
        size: int,
        text: str,
    ) -> RecordFile:
        bucket = self._bucket(category)
        record = RecordFile(
            id=new_id(), name=name, content_type=content_type, size=size, text=text
        )
        bucket[record.id] = record
        return record

    def remove(self, category: str, file_id: str) -> bool:
        return self._bucket(category).pop(file_id, None) is not None

    def combined(self, category: str) -> str:
        return "\n\n".join(f.text for f in self._bucket(category).values())

    def as_map(self) -> Dict[str, str]:
        """category -> combined text, empty categories left out."""
        return {
            category: self.combined(category)
            for category, bucket in self.files.items()
            if bucket
        }

    def listing(self) -> Dict[str, List[dict]]:
        return {
            category: [f.describe() for f in bucket.values()]
            for category, bucket in self.files.items()
        }

    def clear(self) -> None:
        for bucket in self.files.values():
            bucket.clear()
