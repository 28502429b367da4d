"""
Notes service.

Per-(paper, user) free-form notes behind notes:get and notes:update.
Returns Result values; the realtime handler branches on Ok/Err.

Dependencies: sqlalchemy, researchly.boundary.db
System role: Note persistence service
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from researchly.boundary.db.CRUD.note_crud import note_crud
from researchly.boundary.db.models.note_model import NoteModel
from researchly.core.exceptions import ErrorKind
from researchly.core.result import Err, Ok, Result
from researchly.models.note import NoteRecord
from researchly.models.session import ensure_utc

logger = logging.getLogger(__name__)


def _to_record(note: NoteModel) -> NoteRecord:
    return NoteRecord(
        paper_id=note.paper_id,
        user_id=note.user_id,
        content=note.content,
        updated_at=ensure_utc(note.updated_at),
    )


class NotesService:
    """Fetch and save notes."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def get_or_create(self, paper_id: str, user_id: str) -> Result[NoteRecord]:
        """
        Return the user's note for a paper, creating an empty one if absent.

        A concurrent creator winning the unique (user, paper) constraint is
        not a failure; the winner's row is re-read.

        Returns:
            Ok(NoteRecord) or Err(storage_error, "Failed to fetch notes")
        """
        try:
            try:
                async with self._session_factory() as db, db.begin():
                    note = await note_crud.get_by_paper_and_user(db, paper_id, user_id)
                    if note is None:
                        note = await note_crud.create(db, paper_id=paper_id, user_id=user_id, content="")
                    record = _to_record(note)
            except IntegrityError:
                logger.info(f"{__name__}:get_or_create - Lost creation race, re-reading")
                async with self._session_factory() as db:
                    note = await note_crud.get_by_paper_and_user(db, paper_id, user_id)
                    if note is None:
                        return Err(ErrorKind.STORAGE_ERROR, "Failed to fetch notes")
                    record = _to_record(note)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:get_or_create - FAILED: {type(e).__name__}: {e}")
            return Err(ErrorKind.STORAGE_ERROR, "Failed to fetch notes")
        return Ok(record)

    async def _save(self, paper_id: str, user_id: str, content: str) -> NoteRecord:
        async with self._session_factory() as db, db.begin():
            note = await note_crud.upsert(db, paper_id, user_id, content)
            return _to_record(note)

    async def update(self, paper_id: str, user_id: str, content: str) -> Result[NoteRecord]:
        """
        Create or overwrite the user's note for a paper.

        When two saves race to create the note, the loser retries against the
        row the winner inserted, so the last write wins.

        Returns:
            Ok(NoteRecord) or Err(storage_error, "Failed to update notes")
        """
        try:
            try:
                record = await self._save(paper_id, user_id, content)
            except IntegrityError:
                logger.info(f"{__name__}:update - Lost creation race, retrying as update")
                record = await self._save(paper_id, user_id, content)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:update - FAILED: {type(e).__name__}: {e}")
            return Err(ErrorKind.STORAGE_ERROR, "Failed to update notes")
        logger.info(f"{__name__}:update - OK paper_id={paper_id}, chars={len(content)}")
        return Ok(record)
