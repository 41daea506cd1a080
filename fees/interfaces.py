from abc import ABC, abstractmethod
from typing import Dict, Optional
from .models import FeeSnapshot

class BaseConfigSource(ABC):
    code: str

    @abstractmethod
    def load(self) -> FeeSnapshot: ...

    def fingerprint(self) -> Optional[Dict[str, float]]:
        """Change marker used for hot reload; None means never changes."""
        return None
