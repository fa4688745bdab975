"""Secure OTP code generation under character-class constraints.

A code is assembled in three steps. Each selected class first contributes its
own share of characters, in the fixed order numeric then alphabetic, with each
share clamped to what is left of the requested length. Any remaining slots are
filled from the union of the selected alphabets. The assembled sequence is
then shuffled with Fisher-Yates so class blocks do not sit at predictable
positions.

Every draw goes through a single cryptographically secure source
(``secrets.randbelow`` by default). A failing source is surfaced as
``RandomSourceFailure``; there is no fallback to a non-secure generator.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from authsome_otp.config import settings
from authsome_otp.errors import GenerationConstraintViolation, RandomSourceFailure

DEFAULT_LENGTH = 6
DEFAULT_MIN_COUNT = 4
DEFAULT_MAX_COUNT = 6

RandomSource = Callable[[int], int]


@dataclass(frozen=True)
class CharacterClass:
    name: str
    alphabet: str
    order: int


NUMERIC = CharacterClass(name="numeric", alphabet=string.digits, order=0)
ALPHABETIC = CharacterClass(name="alphabetic", alphabet=string.ascii_letters, order=1)

CHARACTER_CLASSES = {cls.name: cls for cls in (NUMERIC, ALPHABETIC)}


@dataclass(frozen=True)
class ClassRule:
    """Selects a character class and bounds how many characters it seeds.

    An unset or zero bound falls back to the default (min 4, max 6).
    """

    character_class: CharacterClass
    min_count: Optional[int] = None
    max_count: Optional[int] = None

    @property
    def effective_min(self) -> int:
        if not self.min_count:
            return DEFAULT_MIN_COUNT
        return max(0, self.min_count)

    @property
    def effective_max(self) -> int:
        if not self.max_count:
            return DEFAULT_MAX_COUNT
        return max(0, self.max_count)


@dataclass(frozen=True)
class GeneratorOptions:
    rules: tuple[ClassRule, ...] = ()
    length: int = DEFAULT_LENGTH

    @classmethod
    def of(
        cls,
        *classes: CharacterClass,
        length: int = DEFAULT_LENGTH,
        min_counts: Optional[dict[str, int]] = None,
        max_counts: Optional[dict[str, int]] = None,
    ) -> "GeneratorOptions":
        min_counts = min_counts or {}
        max_counts = max_counts or {}
        rules = tuple(
            ClassRule(
                character_class=character_class,
                min_count=min_counts.get(character_class.name),
                max_count=max_counts.get(character_class.name),
            )
            for character_class in classes
        )
        return cls(rules=rules, length=length)


def configured_rule(
    character_class: CharacterClass,
    min_count: Optional[int] = None,
    max_count: Optional[int] = None,
) -> ClassRule:
    """Rule whose unset bounds come from the OTP_MIN_* / OTP_MAX_* settings."""
    if character_class.name == ALPHABETIC.name:
        default_min, default_max = settings.otp_min_alphabetic, settings.otp_max_alphabetic
    else:
        default_min, default_max = settings.otp_min_numeric, settings.otp_max_numeric
    return ClassRule(
        character_class,
        min_count=default_min if min_count is None else min_count,
        max_count=default_max if max_count is None else max_count,
    )


def default_options() -> GeneratorOptions:
    return GeneratorOptions(rules=(configured_rule(NUMERIC),), length=settings.otp_length)


def generate_otp(
    options: GeneratorOptions,
    random_source: RandomSource = secrets.randbelow,
) -> str:
    length = options.length if options.length > 0 else DEFAULT_LENGTH
    rules = _ordered_rules(options.rules)
    if not rules:
        raise GenerationConstraintViolation("No character class selected")

    counts = []
    remaining = length
    for rule in rules:
        count = _clamp(rule.effective_min, 0, min(rule.effective_max, remaining))
        counts.append(count)
        remaining -= count

    if sum(counts) > length:
        raise GenerationConstraintViolation(
            "Minimum character requirements exceed OTP length"
        )

    chars: list[str] = []
    for rule, count in zip(rules, counts):
        chars.extend(_draw(rule.character_class.alphabet, count, random_source))

    if len(chars) < length:
        charset = "".join(rule.character_class.alphabet for rule in rules)
        chars.extend(_draw(charset, length - len(chars), random_source))

    _shuffle(chars, random_source)
    return "".join(chars)


def _ordered_rules(rules: Iterable[ClassRule]) -> list[ClassRule]:
    # numeric before alphabetic: later classes see the length already consumed
    selected: dict[str, ClassRule] = {}
    for rule in rules:
        selected.setdefault(rule.character_class.name, rule)
    return sorted(selected.values(), key=lambda rule: rule.character_class.order)


def _clamp(value: int, low: int, high: int) -> int:
    if value < low:
        return low
    if value > high:
        return high
    return value


def _draw(alphabet: str, count: int, random_source: RandomSource) -> list[str]:
    if not alphabet or count <= 0:
        return []
    size = len(alphabet)
    return [alphabet[_secure_index(size, random_source)] for _ in range(count)]


def _shuffle(chars: list[str], random_source: RandomSource) -> None:
    for i in range(len(chars) - 1, 0, -1):
        j = _secure_index(i + 1, random_source)
        chars[i], chars[j] = chars[j], chars[i]


def _secure_index(upper: int, random_source: RandomSource) -> int:
    try:
        return random_source(upper)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceFailure("Secure random source is unavailable") from exc
