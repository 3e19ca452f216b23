from abc import ABC, abstractmethod
from typing import List, Optional

from trace_api.domain.files import RemoteFile
from trace_api.domain.models import AnalysisRecord, NewAnalysisRecord


class RecordStoreInterface(ABC):
    """Persistence contract for analysis records"""

    @abstractmethod
    async def insert(self, record: NewAnalysisRecord) -> str:
        ...

    @abstractmethod
    async def list_all(self) -> List[AnalysisRecord]:
        """Return every record ordered by ``sent_at`` descending."""
        ...


class GenerativeBackendInterface(ABC):
    """Contract for the generative AI backend (content generation + file ingestion)"""

    @abstractmethod
    async def upload_file(self, path: str, *, mime_type: str, display_name: str) -> RemoteFile:
        ...

    @abstractmethod
    async def get_file(self, name: str) -> RemoteFile:
        ...

    @abstractmethod
    async def delete_file(self, name: str) -> None:
        ...

    @abstractmethod
    async def generate_from_file(
        self,
        remote_file: RemoteFile,
        prompt: str,
        *,
        model: str,
        response_mime_type: str = "application/json",
    ) -> Optional[str]:
        ...

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        *,
        model: str,
        response_mime_type: str = "text/plain",
    ) -> Optional[str]:
        ...


class SpeechBackendInterface(ABC):
    """Contract for the text-to-speech backend"""

    media_type: str = "audio/mpeg"

    @abstractmethod
    async def synthesize(self, text: str) -> Optional[bytes]:
        ...
