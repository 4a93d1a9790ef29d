from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.errors import EntryBuildError


class FormattedContentItem(BaseModel):
    """
    A WordPress item after formatting.

    Field aliases are the normalized export names (``wp:post_id`` →
    ``postId``); the model accepts either form.  Fields the export carries
    but the importer does not use are kept as extras.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        frozen=True,
    )

    content_type: str = Field(..., alias="contentType")
    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[str] = None
    post_id: Optional[str] = Field(None, alias="postId")
    post_parent: Optional[str] = Field(None, alias="postParent")
    post_name: Optional[str] = Field(None, alias="postName")
    post_type: Optional[str] = Field(None, alias="postType")
    post_date: Optional[str] = Field(None, alias="postDate")
    status: Optional[str] = None
    attachment_url: Optional[str] = Field(None, alias="attachmentUrl")
    content_encoded: Optional[str] = Field(None, alias="contentEncoded")
    excerpt_encoded: Optional[str] = Field(None, alias="excerptEncoded")
    postmeta: Dict[str, Optional[str]] = Field(default_factory=dict)
    content_rich_text: Optional[Dict[str, Any]] = Field(None, alias="contentRichText")
    excerpt_rich_text: Optional[Dict[str, Any]] = Field(None, alias="excerptRichText")
    category_slug: Optional[str] = Field(None, alias="categorySlug")

    @field_validator("post_id", "post_parent", mode="before")
    @classmethod
    def _id_as_string(cls, v: Any):
        # Parent linkage compares these two; the export may give ints or strings
        if v is None or v == "":
            return None
        return str(v).strip()


class AssetRecord(BaseModel):
    """An attachment paired with the Contentful asset created for it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attachment: FormattedContentItem
    asset: Dict[str, Any]

    @property
    def asset_id(self) -> str:
        return self.asset["sys"]["id"]


class EntryResult(BaseModel):
    """Outcome of building one entry: ``entry`` on success, ``error`` otherwise."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title: Optional[str] = None
    entry_id: Optional[str] = None
    entry: Optional[Dict[str, Any]] = None
    error: Optional[EntryBuildError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.entry is not None
