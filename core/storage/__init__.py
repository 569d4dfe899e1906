"""
스토리지 모듈

장부 외 보조 데이터 저장소 (메모)
"""

from core.storage.note_store import NoteStore

__all__ = [
    "NoteStore",
]
