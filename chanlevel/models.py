from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

ERROR_MARKER = "Error"


class CodeRequest(BaseModel):
    """One message segment handed to the channel level."""

    id: int
    messageId: int = Field(..., alias="message_id")
    sender: str = Field(..., alias="login")
    timestamp: int
    segmentsCount: int = Field(..., alias="segments_count", ge=0, le=0xFFFFFFFF)
    segmentNumber: int = Field(..., alias="segment_number", ge=0, le=0xFFFFFFFF)
    data: str
    error: str = ""
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("data")
    @classmethod
    def validate_utf8(cls, v: str) -> str:
        # JSON allows escaped lone surrogates, which have no UTF-8 encoding
        try:
            v.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError(f"data is not valid UTF-8 text at index {e.start}") from e
        return v


class CodeTransferRequest(BaseModel):
    """Segment forwarded downstream after passing through the channel."""

    id: int
    messageId: int = Field(..., alias="message_id")
    sender: str
    timestamp: int
    segmentsCount: int = Field(..., alias="segments_count")
    segmentNumber: int = Field(..., alias="segment_number")
    data: str
    error: str = ""
    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_request(cls, request: CodeRequest, payload: bytes, mismatch_detected: bool) -> CodeTransferRequest:
        return cls(
            id=request.id,
            messageId=request.messageId,
            sender=request.sender,
            timestamp=request.timestamp,
            segmentsCount=request.segmentsCount,
            segmentNumber=request.segmentNumber,
            data=payload.decode("utf-8", errors="replace"),
            error=ERROR_MARKER if mismatch_detected else "",
        )


class StatsModel(BaseModel):
    received: int
    dropped: int
    completed: int
    mismatched: int
    failed: int
    forwarded: int
    forwardErrors: int
    correctedFrames: int
