from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# ==================== ENUMS ====================

class Difficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"

class LessonType(str, Enum):
    LESSON = "LESSON"
    CHALLENGE = "CHALLENGE"

class Language(str, Enum):
    PYTHON = "python"
    CPP = "cpp"
    JAVA = "java"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    GO = "go"
    RUST = "rust"

# ==================== COURSE MODELS ====================

class Course(BaseModel):
    course_id: str
    title: str
    description: str
    difficulty: Difficulty = Difficulty.BEGINNER
    tags: List[str] = []
    is_published: bool = False
    created_at: Optional[datetime] = None

class Lesson(BaseModel):
    """
    order_index is the only sequencing key inside a course.
    Uniqueness is not enforced; duplicates keep store order.
    """
    lesson_id: str
    course_id: str
    title: str
    order_index: int
    content_markdown: str = ""
    type: LessonType = LessonType.LESSON
    challenge_ids: List[str] = []

# ==================== CHALLENGE MODELS ====================

class ChallengeTestCase(BaseModel):
    input: Any
    expected_output: Any
    is_hidden: bool = False

LanguageCodes = Dict[Language, Optional[str]]

def _require_one_language(codes: LanguageCodes, label: str) -> LanguageCodes:
    if not any(code and code.strip() for code in codes.values()):
        raise ValueError(f"At least one {label} language must be provided")
    return codes

class Challenge(BaseModel):
    challenge_id: str
    lesson_id: str
    title: str
    starter_codes: LanguageCodes
    solution_codes: LanguageCodes
    test_cases: List[ChallengeTestCase] = []

    @field_validator("starter_codes")
    @classmethod
    def validate_starter_codes(cls, v):
        return _require_one_language(v, "starter code")

    @field_validator("solution_codes")
    @classmethod
    def validate_solution_codes(cls, v):
        return _require_one_language(v, "solution code")

    def supports(self, language: Language) -> bool:
        code = self.starter_codes.get(language)
        return bool(code and code.strip())

    def available_languages(self) -> List[str]:
        return [lang.value for lang in self.starter_codes if self.supports(lang)]

    def public_test_cases(self) -> List[ChallengeTestCase]:
        return [tc for tc in self.test_cases if not tc.is_hidden]

    def to_public(self) -> Dict[str, Any]:
        """Client view: no solutions, no hidden test cases"""
        return {
            "id": self.challenge_id,
            "lessonId": self.lesson_id,
            "title": self.title,
            "starterCodes": {
                lang.value: code for lang, code in self.starter_codes.items() if code
            },
            "testCases": [
                {"input": tc.input, "expectedOutput": tc.expected_output}
                for tc in self.public_test_cases()
            ],
        }
