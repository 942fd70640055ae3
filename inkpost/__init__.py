"""inkpost static blog generator.

This package reads Markdown posts with YAML front-matter from a fixed
directory, validates and renders them, and writes a static blog made of post
detail pages, member pages and tag pages.

The main entry point is the CLI module, which provides commands for building
the site and inspecting the loaded posts.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
