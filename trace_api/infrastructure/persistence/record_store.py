from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trace_api.application.interfaces import RecordStoreInterface
from trace_api.domain.models import AnalysisRecord, NewAnalysisRecord
from trace_api.models.traceback import Traceback


def _to_domain(row: Traceback) -> AnalysisRecord:
    return AnalysisRecord(
        id=str(row.id),
        sent_at=row.sent_at,
        analysis=row.analysis or {},
        filename=row.filename,
        filesize=row.filesize,
        duration=row.duration,
    )


class SQLAlchemyRecordStore(RecordStoreInterface):
    """SQLAlchemy implementation of the traceback record store"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(self, record: NewAnalysisRecord) -> str:
        db_record = Traceback(
            sent_at=record.sent_at,
            filename=record.filename,
            filesize=record.filesize,
            duration=record.duration,
            analysis=record.analysis,
        )
        async with self._session_factory() as session:
            session.add(db_record)
            await session.commit()
            await session.refresh(db_record)
            return str(db_record.id)

    async def list_all(self) -> List[AnalysisRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Traceback).order_by(Traceback.sent_at.desc())
            )
            rows = result.scalars().all()
        return [_to_domain(row) for row in rows]


__all__ = ["SQLAlchemyRecordStore"]
