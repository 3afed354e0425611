"""
Natural languages served by the vocabulary endpoints.

Each language has a client-side name used in request paths and the name the
graph database stores on Term nodes.
"""

from enum import Enum

from fastapi import HTTPException


class Language(Enum):
    GERMAN = ("german", "German")
    ANCIENT_GREEK = ("ancientGreek", "Ancient Greek")
    LATIN = ("latin", "Latin")

    def __init__(self, path_name: str, database_name: str):
        self.path_name = path_name
        self.database_name = database_name

    @classmethod
    def of_client_value(cls, language: str) -> "Language":
        """
        Raises:
            ValueError: if `language` is not the client-side name of a supported language
        """
        return cls._lookup(language, "path_name")

    @classmethod
    def of_database_name(cls, language: str) -> "Language":
        """
        Raises:
            ValueError: if `language` is not the database name of a supported language
        """
        return cls._lookup(language, "database_name")

    @classmethod
    def _lookup(cls, language: str, attribute: str) -> "Language":
        for candidate in cls:
            if getattr(candidate, attribute) == language:
                return candidate
        acceptable = ", ".join(getattr(candidate, attribute) for candidate in cls)
        raise ValueError(f"'{language}' is not a recognized language. Acceptable ones are {acceptable}")

    def __str__(self) -> str:
        return self.database_name


def require_language(language: str) -> Language:
    """FastAPI dependency that rejects unknown `{language}` path segments with a 400."""
    try:
        return Language.of_client_value(language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
