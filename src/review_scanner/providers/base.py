from __future__ import annotations

from abc import ABC, abstractmethod

from review_scanner.models import ChangedFile


class ChangedFileProvider(ABC):
    @abstractmethod
    def list_changed_files(self) -> list[ChangedFile]:
        raise NotImplementedError
