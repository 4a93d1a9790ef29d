from .content import AssetRecord, EntryResult, FormattedContentItem

__all__ = ["AssetRecord", "EntryResult", "FormattedContentItem"]
