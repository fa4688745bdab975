import string
from collections import Counter

import pytest

from authsome_otp.errors import GenerationConstraintViolation, RandomSourceFailure
from authsome_otp.services.generator import (
    ALPHABETIC,
    NUMERIC,
    ClassRule,
    GeneratorOptions,
    generate_otp,
)


def _both(length=8, numeric_min=2, alpha_min=2):
    return GeneratorOptions.of(
        NUMERIC,
        ALPHABETIC,
        length=length,
        min_counts={"numeric": numeric_min, "alphabetic": alpha_min},
    )


class TestGenerateOtp:
    def test_numeric_code_has_requested_length(self):
        code = generate_otp(GeneratorOptions.of(NUMERIC, length=6))

        assert len(code) == 6
        assert code.isdigit()

    def test_alphabetic_code_only_uses_letters(self):
        code = generate_otp(GeneratorOptions.of(ALPHABETIC, length=10))

        assert len(code) == 10
        assert set(code) <= set(string.ascii_letters)

    def test_mixed_code_honors_minimums(self):
        for _ in range(200):
            code = generate_otp(_both(length=8, numeric_min=3, alpha_min=4))

            assert len(code) == 8
            assert sum(ch.isdigit() for ch in code) >= 3
            assert sum(ch.isalpha() for ch in code) >= 4
            assert set(code) <= set(string.digits + string.ascii_letters)

    def test_non_positive_length_defaults_to_six(self):
        assert len(generate_otp(GeneratorOptions.of(NUMERIC, length=0))) == 6
        assert len(generate_otp(GeneratorOptions.of(NUMERIC, length=-3))) == 6

    def test_no_class_selected_fails(self):
        with pytest.raises(GenerationConstraintViolation):
            generate_otp(GeneratorOptions(length=6))

    def test_later_class_clamped_to_remaining_length(self):
        for _ in range(50):
            code = generate_otp(_both(length=8, numeric_min=5, alpha_min=5))

            assert len(code) == 8
            assert sum(ch.isdigit() for ch in code) >= 5
            assert sum(ch.isalpha() for ch in code) >= 3

    def test_default_minimums_for_both_classes_at_six(self):
        code = generate_otp(
            GeneratorOptions.of(NUMERIC, ALPHABETIC, length=6),
            random_source=lambda upper: 0,
        )

        assert Counter(code) == Counter({"0": 4, "a": 2})

    @pytest.mark.parametrize("length", [1, 2, 3])
    def test_short_numeric_code_clamps_minimum(self, length):
        code = generate_otp(GeneratorOptions.of(NUMERIC, length=length))

        assert len(code) == length
        assert code.isdigit()

    def test_minimum_capped_by_maximum(self):
        options = GeneratorOptions(
            rules=(
                ClassRule(NUMERIC, min_count=9, max_count=2),
                ClassRule(ALPHABETIC, min_count=9, max_count=2),
            ),
            length=4,
        )

        code = generate_otp(options)

        assert sorted(ch.isdigit() for ch in code) == [False, False, True, True]

    def test_duplicate_rules_keep_first(self):
        options = GeneratorOptions(
            rules=(ClassRule(NUMERIC, min_count=2), ClassRule(NUMERIC, min_count=9)),
            length=4,
        )

        assert generate_otp(options).isdigit()

    def test_fill_draws_from_union_in_class_order(self):
        # a source that always returns 0 picks the first character of each alphabet
        options = GeneratorOptions(
            rules=(ClassRule(ALPHABETIC, min_count=2), ClassRule(NUMERIC, min_count=2)),
            length=6,
        )

        code = generate_otp(options, random_source=lambda upper: 0)

        assert Counter(code) == Counter({"0": 4, "a": 2})

    def test_draws_stay_within_bounds_and_shuffle_every_position(self):
        calls = []

        def source(upper):
            calls.append(upper)
            return upper - 1

        generate_otp(_both(length=6, numeric_min=2, alpha_min=2), random_source=source)

        draws, swaps = calls[:6], calls[6:]
        assert draws == [10, 10, 52, 52, 62, 62]
        assert swaps == [6, 5, 4, 3, 2]

    def test_random_source_failure_propagates(self):
        def broken(upper):
            raise OSError("no entropy")

        with pytest.raises(RandomSourceFailure) as excinfo:
            generate_otp(GeneratorOptions.of(NUMERIC), random_source=broken)

        assert isinstance(excinfo.value.__cause__, OSError)

    def test_class_blocks_are_not_positionally_fixed(self):
        samples = 2000
        options = _both(length=8, numeric_min=2, alpha_min=2)
        digits_at = Counter()
        for _ in range(samples):
            code = generate_otp(options)
            for position, ch in enumerate(code):
                if ch.isdigit():
                    digits_at[position] += 1

        # about a third of the characters are digits, spread evenly
        for position in range(8):
            share = digits_at[position] / samples
            assert 0.2 < share < 0.47, (position, share)
