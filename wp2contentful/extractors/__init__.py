"""
Extractors for WordPress export documents.

This subpackage loads the JSON mirror of a WordPress XML export, splits the
exported items by post type and reads the channel level category
definitions.
"""

from .wordpress_extractor import extract_categories, load_export, split_data_by_post_type

__all__ = ["extract_categories", "load_export", "split_data_by_post_type"]
