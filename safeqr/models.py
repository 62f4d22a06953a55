from typing import List, Literal, Optional
from pydantic import BaseModel, Field

class ScanRequest(BaseModel):
    content: str = Field(..., description="Decoded QR / barcode payload or pasted text.")
    symbology: Optional[str] = Field(None, description="Barcode type reported by the decoder, stored as-is.")
    aggressive: Optional[bool] = Field(
        None,
        description="Run extended URL heuristics. Falls back to the server preference.",
    )

class UrlAnalyzeRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Normalized URL to analyze.")
    raw: Optional[str] = Field(None, description="Original payload; defaults to the URL.")
    aggressive: Optional[bool] = None

class WifiRequest(BaseModel):
    content: str

class SanitizeRequest(BaseModel):
    url: str

class HistoryDeleteRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)
    all: bool = False

class HistoryExportRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)

class UrlAnalyzeResponse(BaseModel):
    flags: List[str]
    level: Literal["low", "medium", "high"]
    explanations: List[str]

class WifiResponse(BaseModel):
    wifi: Optional[dict]
    join_available: bool
