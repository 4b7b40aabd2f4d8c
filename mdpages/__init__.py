"""Markdown to routed page generator.

This package turns a directory of Markdown documents into routable page
artifacts for a component web host, plus a JSON index that lets the host
discover the generated pages at runtime.

Package Structure
-----------------
- `pipeline/page_generator/`:
    Headless generation pipeline: options, metadata parsing, route
    derivation, Markdown conversion, file discovery, rendering, the
    generated index and the runtime discovery service.
- `program_generate_pages.py`: Command line entry point.
- `config.py`: Configuration constants (paths, defaults, log format) as UPPER_SNAKE_CASE.
- `exceptions.py`: Project-specific exception classes.

Examples
--------
>>> import mdpages
>>> # See ``mdpages.pipeline.page_generator.runner`` for programmatic entry points.
"""
