"""Domain enums and fixed vocabularies for onboarding and verification."""
from enum import Enum


class Nationality(str, Enum):
    KR = "KR"
    JP = "JP"


class Language(str, Enum):
    KO = "ko"
    JA = "ja"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "high_school"
    BACHELORS = "bachelors"
    MASTERS = "masters"
    PHD = "phd"


class Proficiency(str, Enum):
    NONE = "none"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    NATIVE = "native"


class DocType(str, Enum):
    RESIDENT_CARD = "resident_card"
    DRIVER_LICENSE = "driver_license"
    PASSPORT = "passport"
    MY_NUMBER_CARD = "my_number_card"


class IdentityStatus(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestType(str, Enum):
    PROFILE_PHOTO = "profile_photo"
    BIO_UPDATE = "bio_update"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewKind(str, Enum):
    """Partitions of the admin review queue."""
    IDENTITY = "identity"
    PROFILE_PHOTO = "profile_photo"
    BIO_UPDATE = "bio_update"


class NotificationType(str, Enum):
    MATCH_ACCEPTED = "match_accepted"
    MATCH_REJECTED = "match_rejected"
    NEW_MESSAGE = "new_message"
    VERIFY_PASSED = "verify_passed"
    VERIFY_REJECTED = "verify_rejected"
    PROFILE_PHOTO_APPROVED = "profile_photo_approved"
    PROFILE_PHOTO_REJECTED = "profile_photo_rejected"
    PROFILE_PHOTO_REQUEST = "profile_photo_request"
    MATCH_REQUEST = "match_request"
    BIO_APPROVED = "bio_approved"
    BIO_REJECTED = "bio_rejected"


# Legal adulthood differs between the two markets.
MINIMUM_AGE = {
    Nationality.KR: 19,
    Nationality.JP: 18,
}

DOC_TYPES_BY_NATIONALITY = {
    Nationality.KR: (DocType.RESIDENT_CARD, DocType.DRIVER_LICENSE, DocType.PASSPORT),
    Nationality.JP: (
        DocType.RESIDENT_CARD,
        DocType.DRIVER_LICENSE,
        DocType.PASSPORT,
        DocType.MY_NUMBER_CARD,
    ),
}

INTERESTS_BY_NATIONALITY = {
    Nationality.KR: (
        "영화", "음악", "여행", "독서", "요리", "운동", "패션", "게임", "언어 교환",
        "사진", "미술", "테크놀로지", "댄스", "명상", "자연", "음식", "동물",
    ),
    Nationality.JP: (
        "映画", "音楽", "旅行", "読書", "料理", "スポーツ", "ファッション", "ゲーム", "言語交換",
        "写真", "美術", "テクノロジー", "ダンス", "瞑想", "自然", "食べ物", "動物",
    ),
}

# Languages rated during onboarding
RATED_LANGUAGES = (Language.KO, Language.JA)

ONBOARDING_TOTAL_STEPS = 5
ONBOARDING_VERIFICATION_STEP = 5
