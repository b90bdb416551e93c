"""
gui - Qt Adapter for the Image Browser

Worker threads and the signal bridge around BrowseSession
"""

from .gui_workers import CommitWorker, ScanWorker, SessionBridge

__all__ = ["CommitWorker", "ScanWorker", "SessionBridge"]
