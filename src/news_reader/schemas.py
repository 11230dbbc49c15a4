from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from typing import Annotated, Any, List, Optional


def _as_text(value: Any) -> Optional[str]:
    """Numbers become strings; anything else that is not text becomes None."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


Text = Annotated[Optional[str], BeforeValidator(_as_text)]


# Upstream wire format, kept in the provider's camelCase.
class RawSource(BaseModel):
    id: Text = None
    name: Text = None


class RawArticle(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Text = None
    source: Optional[RawSource] = None
    author: Text = None
    title: Text = None
    description: Text = None
    url: Text = None
    urlToImage: Text = None
    publishedAt: Text = None
    content: Text = None

    @field_validator("source", mode="before")
    @classmethod
    def coerce_source(cls, value: Any) -> Any:
        # Some providers send the source as a bare name.
        if isinstance(value, str):
            return {"name": value}
        if isinstance(value, dict):
            return value
        return None


class UpstreamResponse(BaseModel):
    status: str
    totalResults: int = 0
    articles: List[RawArticle]

    @field_validator("articles", mode="before")
    @classmethod
    def drop_non_objects(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        return value


class UpstreamErrorBody(BaseModel):
    status: str = "error"
    code: Optional[str] = None
    message: Optional[str] = None


# Backend responses
class ErrorOut(BaseModel):
    error: str
    message: str


class UploadData(BaseModel):
    url: str
    filename: str
    size: int


class UploadOut(BaseModel):
    success: bool
    message: str
    data: Optional[UploadData] = None


class FileOut(BaseModel):
    filename: str
    size: int


class FileListOut(BaseModel):
    success: bool = True
    files: List[FileOut] = Field(default_factory=list)
