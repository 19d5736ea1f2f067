from schemas.base import CreatedResponse, SuccessResponse
from schemas.certificate import Certificate
from schemas.fluency import (
    FluencyHistoryEntry, FluencyRead, FluencyUpdate, FluencyUpdateResult, LevelMetadata, MigrationResult,
)
from schemas.library import GrammarRule, GrammarRuleCreate, VocabularyCreate, VocabularyItem, VocabularyUpdate
from schemas.progress import LessonProgress, ProgressOverview, ProgressRecord, ProgressSummary, ProgressSummaryUpdate
from schemas.study import (
    Mistake, MistakeCreate, MistakeUpdate, ReviewCard, ReviewCardCreate, ReviewCardList, ReviewCardUpdate,
)
from schemas.user import UserProfile, UserSummary, UserList, SignupRequest, SignupResponse, ProfileResponse

__all__ = [
    "CreatedResponse", "SuccessResponse",
    "Certificate",
    "FluencyHistoryEntry", "FluencyRead", "FluencyUpdate", "FluencyUpdateResult", "LevelMetadata",
    "MigrationResult",
    "GrammarRule", "GrammarRuleCreate", "VocabularyCreate", "VocabularyItem", "VocabularyUpdate",
    "LessonProgress", "ProgressOverview", "ProgressRecord", "ProgressSummary", "ProgressSummaryUpdate",
    "Mistake", "MistakeCreate", "MistakeUpdate", "ReviewCard", "ReviewCardCreate", "ReviewCardList",
    "ReviewCardUpdate",
    "UserProfile", "UserSummary", "UserList", "SignupRequest", "SignupResponse", "ProfileResponse",
]
