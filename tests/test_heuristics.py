import pytest

from sdsgen.errors import ConfigurationError
from sdsgen.pipeline.heuristics import (
    MAX_MODULES,
    MIN_MODULES,
    detect_language,
    detect_platform,
    infer_module_count,
    main_features,
    resolve_module_count,
)

SCENARIO_B = (
    "An AI-powered real-time payment analytics platform with authentication and blockchain integration"
)


def test_explicit_level_wins_over_heuristic():
    assert resolve_module_count("simple", "A simple todo app") == 4
    assert resolve_module_count("medium", SCENARIO_B) == 8
    assert resolve_module_count("Complex", "") == 12


def test_keyword_heavy_description_is_clamped_to_maximum():
    assert infer_module_count(SCENARIO_B) == MAX_MODULES
    assert resolve_module_count("auto", SCENARIO_B) == MAX_MODULES


def test_plain_description_scores_from_base():
    # base 5, short text -1
    assert infer_module_count("A todo list") == 4
    # base 5, one medium keyword, short text -1
    assert infer_module_count("A notes tool with search") == 5


@pytest.mark.parametrize(
    "text",
    [
        "",
        "simple basic minimal crud",
        " ".join(["word"] * 1200),
        " ".join(["blockchain payment analytics security ai distributed"] * 300),
    ],
)
def test_count_is_always_within_bounds(text):
    assert MIN_MODULES <= infer_module_count(text) <= MAX_MODULES


def test_unknown_complexity_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        resolve_module_count("huge", "anything")


def test_language_detection():
    assert detect_language("쇼핑몰 앱을 만들고 싶어요") == "ko"
    assert detect_language("An online shop") == "en"
    assert detect_language("") == "en"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("A mobile banking app", "mobile"),
        ("모바일 쇼핑몰", "mobile"),
        ("A web dashboard", "web"),
        ("웹 게시판", "web"),
        ("A command line tool", "web"),
    ],
)
def test_platform_detection(text, expected):
    assert detect_platform(text) == expected


def test_main_features_have_a_fallback():
    assert main_features("mobile") == "Mobile UI, Touch Interface"
    assert main_features("quantum") == "General Purpose"
