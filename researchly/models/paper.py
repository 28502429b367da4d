"""
Paper record consumed by the AI layer.

Dependencies: pydantic
System role: Read model for uploaded papers
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PaperRecord(BaseModel):
    """
    Uploaded paper as seen by the AI operations.

    Attributes:
        id: Paper identifier
        user_id: Owning user
        title: Paper title
        document_ref: Pointer to retrievable PDF bytes (URL or s3:// key)
        summary: Last generated summary, if any
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: str
    title: str
    document_ref: str | None = None
    summary: str | None = None
