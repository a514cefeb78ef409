"""
truthlens – misinformation-detection dashboard backend.

Entry point:  truthlens.main:app  (FastAPI ASGI application)

Sub-packages:
    ai          Hosted-model client and analyzers (content, entity graph)
    db          In-memory scan history
    feeds       Seeded synthetic news feed and trending topics
    graph       Entity graph model, force-directed layout, render view
    monitor     Input classification and safe image fetching
"""

__version__ = "1.0.0"
