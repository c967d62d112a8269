from devotional_core.bible.catalog import AVAILABLE_TRANSLATIONS, BIBLE_BOOKS, get_book
from devotional_core.bible.manager import TranslationManager, VerificationResult

__all__ = [
    "AVAILABLE_TRANSLATIONS",
    "BIBLE_BOOKS",
    "TranslationManager",
    "VerificationResult",
    "get_book",
]
