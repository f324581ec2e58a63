from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any, Literal, Union

from quiz_assistant.core.types import AnalysisResult, ImageInput


class ImageSource(BaseModel):
    type: str = "base64"          # "base64" | "url"
    media_type: Optional[str] = None
    data: Optional[str] = None
    url: Optional[str] = None


class ContentPart(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None
    source: Optional[ImageSource] = None

    def to_image(self) -> Optional[ImageInput]:
        if self.type != "image" or self.source is None:
            return None
        if self.source.type == "url" and self.source.url:
            return ImageInput(url=self.source.url)
        if self.source.data:
            return ImageInput(media_type=self.source.media_type or "image/jpeg", data=self.source.data)
        return None


class Message(BaseModel):
    role: str = "user"
    content: Union[str, List[ContentPart]]


class AnalyzeRequest(BaseModel):
    messages: List[Message]

    def find_image(self) -> Optional[ImageInput]:
        for message in self.messages:
            if isinstance(message.content, str):
                continue
            for part in message.content:
                image = part.to_image()
                if image is not None:
                    return image
        return None


class AnalyzeMetadata(BaseModel):
    model: str
    processingMethod: str
    documentUsed: bool
    questionsAnalyzed: int
    chunksUsed: int
    accuracy: Literal["high", "medium"]


class AnalyzeResponse(BaseModel):
    content: List[Dict[str, Any]]
    metadata: AnalyzeMetadata

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalyzeResponse":
        meta = result.metadata
        return cls(
            content=result.content,
            metadata=AnalyzeMetadata(
                model=meta.model,
                processingMethod=meta.processing_method,
                documentUsed=meta.document_used,
                questionsAnalyzed=meta.questions_analyzed,
                chunksUsed=meta.chunks_used,
                accuracy=meta.accuracy,
            ),
        )


class DocumentsInfo(BaseModel):
    chunks: int
    pages: int


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
    apiKeyConfigured: bool
    documentsLoaded: bool
    documentsInfo: Optional[DocumentsInfo] = None
    githubUrl: str
    instructions: str


class ErrorResponse(BaseModel):
    error: str
    timestamp: Optional[str] = None
