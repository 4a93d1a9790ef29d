"""
Top-level package for the WordPress → Contentful import utility.

This package bundles all components required to read a WordPress export,
convert HTML bodies to Contentful rich text, upload media as Contentful
assets and create category, furniture and page entries.  Modules are split
into subpackages:

* :mod:`wp2contentful.extractors` – export loading and post type split
* :mod:`wp2contentful.parsers` – item formatting and HTML to rich text
* :mod:`wp2contentful.migrators` – Contentful API interactions
* :mod:`wp2contentful.models` – formatted item and result models
* :mod:`wp2contentful.utils` – errors, logging, IDs and configuration

Each layer has no direct knowledge of configuration or execution
strategy; orchestration is handled in :mod:`wp2contentful.migration_tool`.
"""

__version__ = "0.1.0"
