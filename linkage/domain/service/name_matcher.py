"""Fuzzy name matching.

Four-stage cascade, each stage returning as soon as it qualifies:

    exact       byte-equal strings                         -> 1.0
    normalized  equal after case folding and stripping      -> 0.98
    similarity  SequenceMatcher ratio >= 0.85              -> ratio
    token       Jaccard over token sets >= 0.80            -> jaccard * 0.95

Anything else scores 0 confidence with the best raw coefficient kept in
`score` for diagnostics.
"""

import re
from collections.abc import Iterable
from difflib import SequenceMatcher
from typing import Optional

from linkage.domain.value import MatchMethod, MatchResult

from .base import Service

EXACT_CONFIDENCE = 1.0
NORMALIZED_CONFIDENCE = 0.98
SIMILARITY_THRESHOLD = 0.85
TOKEN_THRESHOLD = 0.80
TOKEN_DISCOUNT = 0.95

DEFAULT_FREE_MAIL_DOMAINS = frozenset(
    {
        "gmail.com",
        "googlemail.com",
        "yahoo.com",
        "hotmail.com",
        "outlook.com",
        "live.com",
        "icloud.com",
        "aol.com",
        "protonmail.com",
        "naver.com",
        "kakao.com",
        "daum.net",
        "hanmail.net",
    }
)

_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Case-fold, strip punctuation and collapse whitespace.

    Examples:
        "  O'Brien-Jones " -> "obrienjones"
        "Smith,  John"     -> "smith john"
    """
    stripped = _PUNCTUATION.sub("", name.casefold())
    return _WHITESPACE.sub(" ", stripped).strip()


def sequence_ratio(a: str, b: str) -> float:
    """Ratcliff/Obershelp similarity, 2*M/T over both strings."""
    return SequenceMatcher(None, a, b).ratio()


def token_jaccard(a: str, b: str) -> float:
    """Jaccard similarity of the whitespace-delimited token sets."""
    tokens_a = set(a.split())
    tokens_b = set(b.split())
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def _no_match(score: float = 0.0, **details) -> MatchResult:
    return MatchResult(
        score=round(score, 4),
        method=MatchMethod.NONE,
        confidence=0.0,
        details={"below_threshold": True, **details},
    )


class NameMatcher(Service):
    """Deterministic comparison of two display names.

    Stateless apart from the free-mail domain list used by the corporate
    domain check, so one instance can be shared by the whole application.
    """

    def __init__(self, free_mail_domains: Iterable[str] = DEFAULT_FREE_MAIL_DOMAINS) -> None:
        """Initialize name matcher.

        Args:
            free_mail_domains: Consumer webmail domains that never count as a
                shared employer domain
        """
        self.free_mail_domains = frozenset(d.lower() for d in free_mail_domains)

    def match(self, name_a: Optional[str], name_b: Optional[str]) -> MatchResult:
        """Compare two names.

        Args:
            name_a: First name (may be None or empty)
            name_b: Second name (may be None or empty)

        Returns:
            Match result; confidence is 0 when no stage qualifies
        """
        if not name_a or not name_b or not name_a.strip() or not name_b.strip():
            return _no_match(reason="empty_input")

        if name_a == name_b:
            return MatchResult(
                score=1.0, method=MatchMethod.EXACT, confidence=EXACT_CONFIDENCE
            )

        normalized_a = normalize_name(name_a)
        normalized_b = normalize_name(name_b)
        if not normalized_a or not normalized_b:
            return _no_match(reason="empty_after_normalization")

        if normalized_a == normalized_b:
            return MatchResult(
                score=1.0,
                method=MatchMethod.NORMALIZED,
                confidence=NORMALIZED_CONFIDENCE,
            )

        ratio = round(sequence_ratio(normalized_a, normalized_b), 4)
        if ratio >= SIMILARITY_THRESHOLD:
            return MatchResult(
                score=ratio,
                method=MatchMethod.SIMILARITY,
                confidence=ratio,
                details={"algorithm": "sequence_ratio", "raw_score": ratio},
            )

        jaccard = round(token_jaccard(normalized_a, normalized_b), 4)
        if jaccard >= TOKEN_THRESHOLD:
            return MatchResult(
                score=jaccard,
                method=MatchMethod.TOKEN,
                confidence=round(jaccard * TOKEN_DISCOUNT, 4),
                details={"algorithm": "jaccard_tokens", "raw_score": jaccard},
            )

        return _no_match(
            max(ratio, jaccard), sequence_ratio=ratio, token_jaccard=jaccard
        )

    def match_batch(
        self, name: str, candidates: Iterable[tuple[str, str]]
    ) -> list[tuple[str, MatchResult]]:
        """Match one name against many (id, name) pairs.

        Args:
            name: Name to look for
            candidates: Pairs of candidate id and candidate name

        Returns:
            Non-zero matches, highest confidence first, ties by id
        """
        results = [
            (candidate_id, self.match(name, candidate_name))
            for candidate_id, candidate_name in candidates
        ]
        results = [r for r in results if r[1].confidence > 0]
        results.sort(key=lambda r: (-r[1].confidence, r[0]))
        return results

    @staticmethod
    def email_domain(email: Optional[str]) -> Optional[str]:
        """Extract the lower-cased domain of an email address.

        Returns:
            Domain, or None for missing or malformed addresses
        """
        if not email or "@" not in email:
            return None
        domain = email.rsplit("@", 1)[1].strip().lower()
        return domain or None

    def is_same_corporate_domain(
        self, email_a: Optional[str], email_b: Optional[str]
    ) -> bool:
        """Whether two addresses share a domain that is not free webmail."""
        domain_a = self.email_domain(email_a)
        domain_b = self.email_domain(email_b)
        if domain_a is None or domain_b is None or domain_a != domain_b:
            return False
        return domain_a not in self.free_mail_domains
