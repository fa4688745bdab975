from dataclasses import replace

from authsome_otp.schemas.otp import ClassRuleRequest, GenerateRequest
from authsome_otp.services import generator
from authsome_otp.services.generator import ALPHABETIC, NUMERIC


def test_default_request_is_numeric(monkeypatch):
    monkeypatch.setattr(
        generator, "settings", replace(generator.settings, otp_min_numeric=3, otp_max_numeric=5)
    )

    options = GenerateRequest(length=6).to_options()

    assert [rule.character_class for rule in options.rules] == [NUMERIC]
    assert (options.rules[0].min_count, options.rules[0].max_count) == (3, 5)


def test_unset_bounds_come_from_settings(monkeypatch):
    monkeypatch.setattr(
        generator,
        "settings",
        replace(
            generator.settings,
            otp_min_numeric=2,
            otp_max_numeric=3,
            otp_min_alphabetic=1,
            otp_max_alphabetic=2,
        ),
    )

    options = GenerateRequest(
        length=8,
        classes=[
            ClassRuleRequest(character_class="alphabetic"),
            ClassRuleRequest(character_class="numeric", max_count=4),
        ],
    ).to_options()

    alphabetic, numeric = options.rules
    assert alphabetic.character_class is ALPHABETIC
    assert (alphabetic.min_count, alphabetic.max_count) == (1, 2)
    assert numeric.character_class is NUMERIC
    assert (numeric.min_count, numeric.max_count) == (2, 4)
