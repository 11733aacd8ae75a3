"""
Copydesk: structured email content as a Section/Content table.

Markdown and HTML table codecs, pure row mutations, AI edit commands and a
per-campaign undo/redo history, exposed through a FastAPI service.
"""

__version__ = "0.1.0"
