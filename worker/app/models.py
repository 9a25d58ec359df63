# worker/app/models.py
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field

ANALYZE_PROMPT = (
    "Analyze this image and provide a detailed description and relevant tags. "
    "Return the response in this exact JSON format without any markdown "
    "formatting or additional text: "
    '{ "description": "<detailed description>", "tags": ["tag1", "tag2", ...] }'
)


@dataclass(frozen=True)
class StoredImage:
    """One request's upload, written to the transient directory."""

    path: Path
    mime: str
    size: int
    original_name: str = ""

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class AnalysisRequest:
    data_uri: str
    model: str
    max_tokens: int = 500
    prompt: str = ANALYZE_PROMPT

    def messages(self) -> List[Dict[str, Any]]:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self.prompt},
                    {"type": "image_url", "image_url": {"url": self.data_uri}},
                ],
            }
        ]


class AnalysisResult(BaseModel):
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    confidence: int


class ErrorOut(BaseModel):
    error: str
