from abc import ABC, abstractmethod
from typing import Any, Dict

from models import Snapshot

class HotspotRule(ABC):
    name: str = ""

    @abstractmethod
    def when(self, snapshot: Snapshot) -> bool: ...
    @abstractmethod
    def then(self, snapshot: Snapshot) -> None: ...
    @abstractmethod
    def params(self) -> Dict[str, Any]: ...
