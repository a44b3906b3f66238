"""Style records and style page documents."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class Style(BaseModel):
    """An administrator-curated clothing category."""
    id: str = Field(..., description="Style ID (ObjectId hex)")
    name: str = Field(..., description="Style name shown to visitors")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Style":
        """Build a style from a raw styledata document."""
        return cls(id=str(document["_id"]), name=document.get("stylename") or "")


class StyleListPage(BaseModel):
    """Style list shown on the admin and style form pages."""
    title: str
    styles: List[Style]


class StyleEditPage(BaseModel):
    """Edit page for a single style."""
    title: str = "Edit a style"
    stylelist: List[Style]
    edit_style: Style
