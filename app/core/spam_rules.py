"""Rule tables for the heuristic spam detector.

Everything the signal extractors match against lives here as data so that
tuning the detector never touches extractor code.
"""

import re
from typing import NamedTuple

from app.models.enums import ContentType, ReportCategory, Severity


class KeywordTier(NamedTuple):
    weight: float
    keywords: tuple[str, ...]


class SpamPattern(NamedTuple):
    name: str
    regex: re.Pattern[str]
    weight: float
    description: str


KEYWORD_TIERS: dict[str, KeywordTier] = {
    "high": KeywordTier(
        0.30,
        (
            "urgent",
            "limited time",
            "act now",
            "exclusive deal",
            "guaranteed",
            "no questions asked",
            "risk free",
            "cash only",
            "wire transfer",
            "western union",
            "moneygram",
            "advance fee",
            "lottery",
            "winner",
            "congratulations",
            "selected",
            "claim now",
            "verify account",
            "suspend",
            "urgent action required",
            "click here now",
        ),
    ),
    "medium": KeywordTier(
        0.15,
        (
            "free money",
            "easy money",
            "work from home",
            "make money fast",
            "no experience",
            "earn extra",
            "part time",
            "full time income",
            "financial freedom",
            "debt consolidation",
            "credit repair",
            "lowest price",
            "compare rates",
            "refinance",
            "pre-approved",
            "amazing deal",
            "incredible offer",
            "must see",
        ),
    ),
    "low": KeywordTier(
        0.05,
        (
            "discount",
            "sale",
            "offer",
            "promotion",
            "deal",
            "cheap",
            "affordable",
            "budget",
            "save money",
            "best price",
            "special price",
            "reduced price",
            "clearance",
            "bargain",
        ),
    ),
}

# Free-text fields scanned for keywords, in order.
KEYWORD_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "message",
    "name",
    "comments",
)

SHORTENER_DOMAINS: tuple[str, ...] = ("bit.ly", "tinyurl", "t.co", "goo.gl")

SPAM_PATTERNS: tuple[SpamPattern, ...] = (
    SpamPattern(
        "excessive_exclamation", re.compile(r"!{3,}"), 0.20, "Multiple exclamation marks"
    ),
    SpamPattern(
        "phone_numbers",
        re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"),
        0.15,
        "Phone numbers in content",
    ),
    SpamPattern(
        "email_addresses",
        re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
        0.15,
        "Email addresses in content",
    ),
    SpamPattern(
        "excessive_numbers", re.compile(r"\d{10,}"), 0.10, "Long number sequences"
    ),
    SpamPattern(
        "currency_symbols",
        re.compile(r"[$€£¥₹]{2,}|\$\d+k|\$\d+,\d+"),
        0.10,
        "Multiple currency symbols or large amounts",
    ),
    SpamPattern(
        "suspicious_urls",
        re.compile(r"(bit\.ly|tinyurl|t\.co|goo\.gl)", re.IGNORECASE),
        0.30,
        "Shortened URLs",
    ),
    SpamPattern(
        "excessive_caps", re.compile(r"[A-Z]{5,}"), 0.15, "Excessive capitalization"
    ),
    SpamPattern(
        "unicode_characters",
        re.compile(r"[^\x00-\x7F]{3,}"),
        0.10,
        "Excessive non-ASCII characters",
    ),
)

# Secondary text heuristics: (threshold, weight)
CAPS_WORD_RATIO = (0.3, 0.20)
REPEATED_PUNCTUATION = (2, 0.15)
REPEATED_WORD = (3, 0.25)
SUSPICIOUS_URL_WEIGHT = 0.40

REPEATED_PUNCTUATION_RE = re.compile(r"[!?]{2,}")
URL_RE = re.compile(r"https?://[^\s]+")
IPV4_RE = re.compile(r"\d+\.\d+\.\d+\.\d+")

# User risk
PROFILE_FIELDS: tuple[str, ...] = ("first_name", "last_name", "phone", "avatar")
NEW_ACCOUNT_WEIGHT = 0.30
YOUNG_ACCOUNT_WEIGHT = 0.15
YOUNG_ACCOUNT_DAYS = 7
INCOMPLETE_PROFILE_WEIGHT = 0.20
CONFIRMED_REPORT_WEIGHT = 0.20
CONFIRMED_REPORT_CAP = 0.50

# Posting frequency: ((limit, weight) checked strongest first)
HOURLY_POSTING_STEPS = ((5, 0.40), (3, 0.20))
DAILY_POSTING_STEPS = ((20, 0.30), (10, 0.15))

# Aggregation
SCORE_WEIGHTS: dict[str, float] = {
    "keyword_score": 0.30,
    "pattern_score": 0.25,
    "user_score": 0.25,
    "frequency_score": 0.20,
}
REASON_THRESHOLD = 0.30
SCORE_REASONS: dict[str, str] = {
    "keyword_score": "Contains suspicious keywords",
    "pattern_score": "Matches spam patterns",
    "user_score": "Suspicious user behavior",
    "frequency_score": "High posting frequency",
}

# Report classification
CATEGORY_SEVERITY: dict[ReportCategory, Severity] = {
    ReportCategory.SPAM: Severity.MEDIUM,
    ReportCategory.INAPPROPRIATE: Severity.HIGH,
    ReportCategory.FAKE_LISTING: Severity.HIGH,
    ReportCategory.DUPLICATE: Severity.LOW,
    ReportCategory.MISLEADING: Severity.MEDIUM,
    ReportCategory.OTHER: Severity.LOW,
}

REPORTABLE_CONTENT_TYPES: frozenset[ContentType] = frozenset(
    {ContentType.PROPERTY, ContentType.BOOKING, ContentType.USER}
)

DETECTION_VERSION = "1.0"
