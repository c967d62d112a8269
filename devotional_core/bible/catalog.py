"""
Static catalogues: the downloadable translations and the 66 books of the Protestant canon.
"""

from __future__ import annotations

from devotional_core.database.models import BibleBook, BibleTranslation

DEFAULT_TRANSLATION_ID = "kjv"

AVAILABLE_TRANSLATIONS = (
    BibleTranslation(
        id="kjv",
        name="King James Version",
        abbreviation="KJV",
        download_url="https://drive.google.com/uc?export=download&id=1uANfbL-Hdv11L4_EBqn3W7YO6e6xLDeY",
        size_mb=5,
        description="The classic 1611 English translation, beloved for its literary beauty",
    ),
    BibleTranslation(
        id="asv",
        name="American Standard Version",
        abbreviation="ASV",
        download_url="https://drive.google.com/uc?export=download&id=1DWhhZfnl00USYG1w_0-wVUpfHmDmEMy9",
        size_mb=5,
        description="A revision of the KJV published in 1901, known for its accuracy",
    ),
    BibleTranslation(
        id="nheb",
        name="New Heart English Bible",
        abbreviation="NHEB",
        download_url="https://drive.google.com/uc?export=download&id=1ngZ3Lj7kDMU4EJQxc5sljHHX7clQTOCJ",
        size_mb=5,
        description="A modern English translation focused on accuracy and readability",
    ),
)

BIBLE_BOOKS = (
    BibleBook(1, "Genesis", "Old", 50),
    BibleBook(2, "Exodus", "Old", 40),
    BibleBook(3, "Leviticus", "Old", 27),
    BibleBook(4, "Numbers", "Old", 36),
    BibleBook(5, "Deuteronomy", "Old", 34),
    BibleBook(6, "Joshua", "Old", 24),
    BibleBook(7, "Judges", "Old", 21),
    BibleBook(8, "Ruth", "Old", 4),
    BibleBook(9, "1 Samuel", "Old", 31),
    BibleBook(10, "2 Samuel", "Old", 24),
    BibleBook(11, "1 Kings", "Old", 22),
    BibleBook(12, "2 Kings", "Old", 25),
    BibleBook(13, "1 Chronicles", "Old", 29),
    BibleBook(14, "2 Chronicles", "Old", 36),
    BibleBook(15, "Ezra", "Old", 10),
    BibleBook(16, "Nehemiah", "Old", 13),
    BibleBook(17, "Esther", "Old", 10),
    BibleBook(18, "Job", "Old", 42),
    BibleBook(19, "Psalms", "Old", 150),
    BibleBook(20, "Proverbs", "Old", 31),
    BibleBook(21, "Ecclesiastes", "Old", 12),
    BibleBook(22, "Song of Solomon", "Old", 8),
    BibleBook(23, "Isaiah", "Old", 66),
    BibleBook(24, "Jeremiah", "Old", 52),
    BibleBook(25, "Lamentations", "Old", 5),
    BibleBook(26, "Ezekiel", "Old", 48),
    BibleBook(27, "Daniel", "Old", 12),
    BibleBook(28, "Hosea", "Old", 14),
    BibleBook(29, "Joel", "Old", 3),
    BibleBook(30, "Amos", "Old", 9),
    BibleBook(31, "Obadiah", "Old", 1),
    BibleBook(32, "Jonah", "Old", 4),
    BibleBook(33, "Micah", "Old", 7),
    BibleBook(34, "Nahum", "Old", 3),
    BibleBook(35, "Habakkuk", "Old", 3),
    BibleBook(36, "Zephaniah", "Old", 3),
    BibleBook(37, "Haggai", "Old", 2),
    BibleBook(38, "Zechariah", "Old", 14),
    BibleBook(39, "Malachi", "Old", 4),
    BibleBook(40, "Matthew", "New", 28),
    BibleBook(41, "Mark", "New", 16),
    BibleBook(42, "Luke", "New", 24),
    BibleBook(43, "John", "New", 21),
    BibleBook(44, "Acts", "New", 28),
    BibleBook(45, "Romans", "New", 16),
    BibleBook(46, "1 Corinthians", "New", 16),
    BibleBook(47, "2 Corinthians", "New", 13),
    BibleBook(48, "Galatians", "New", 6),
    BibleBook(49, "Ephesians", "New", 6),
    BibleBook(50, "Philippians", "New", 4),
    BibleBook(51, "Colossians", "New", 4),
    BibleBook(52, "1 Thessalonians", "New", 5),
    BibleBook(53, "2 Thessalonians", "New", 3),
    BibleBook(54, "1 Timothy", "New", 6),
    BibleBook(55, "2 Timothy", "New", 4),
    BibleBook(56, "Titus", "New", 3),
    BibleBook(57, "Philemon", "New", 1),
    BibleBook(58, "Hebrews", "New", 13),
    BibleBook(59, "James", "New", 5),
    BibleBook(60, "1 Peter", "New", 5),
    BibleBook(61, "2 Peter", "New", 3),
    BibleBook(62, "1 John", "New", 5),
    BibleBook(63, "2 John", "New", 1),
    BibleBook(64, "3 John", "New", 1),
    BibleBook(65, "Jude", "New", 1),
    BibleBook(66, "Revelation", "New", 22),
)

_BOOKS_BY_ID = {book.id: book for book in BIBLE_BOOKS}


def get_book(book_id: int) -> BibleBook | None:
    return _BOOKS_BY_ID.get(book_id)
