"""Artist-name normalization and the loose name-match test.

Names arriving from the catalog, the identity graph and the setlist archive
differ in case, accents and decoration ("Beyoncé" vs "Beyonce",
"The National" vs "National").  Matching is deliberately simple: fold case,
strip diacritics, trim, then accept equality or containment in either
direction.  No fuzzy scoring is applied.
"""

import unicodedata


def normalize_for_match(name: str) -> str:
    """Lower-case, decompose and strip combining marks, then trim.

    Args:
        name: Raw artist name.

    Returns:
        The normalized comparison key.
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()


def is_artist_name_match(expected: str | None, candidate: str | None) -> bool:
    """Return True when two artist names refer to the same act.

    Either name missing or empty never matches.

    Args:
        expected: The name the user searched for.
        candidate: The name reported by another provider.
    """
    if not expected or not candidate:
        return False

    left = normalize_for_match(expected)
    right = normalize_for_match(candidate)
    if not left or not right:
        return False
    return left == right or left in right or right in left
