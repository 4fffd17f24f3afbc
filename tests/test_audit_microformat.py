"""Tests for the model answer micro-format scanner and per-call parsers."""

from salon_audit.audit.microformat import (
    CORE_GRAMMAR,
    DEFAULT_AFTER_SUFFIX,
    DEFAULT_CONSEQUENCE,
    DEFAULT_EXPLANATION,
    PLACEHOLDER_RECOMMENDATION,
    PLACEHOLDER_STRENGTH,
    LineKind,
    parse_core_analysis,
    parse_growth_tips,
    parse_recommendations,
    parse_score,
    scan,
    split_fields,
    strip_markdown,
)
from salon_audit.audit.types import GrowthTipCategory, GrowthTipImpact
from tests.conftest import CORE_ANSWER, RECOMMENDATIONS_ANSWER, TIPS_ANSWER

KNOWN_NAMES = ["Oczyszczanie twarzy", "Mikrodermabrazja", "Manicure klasyczny"]


class TestStripMarkdown:
    def test_bold_and_italic(self):
        assert strip_markdown("**Ważne** i *pilne*") == "Ważne i pilne"

    def test_code_and_strikethrough(self):
        assert strip_markdown("`kod` ~~stare~~") == "kod stare"

    def test_header(self):
        assert strip_markdown("## Nagłówek") == "Nagłówek"

    def test_snake_case_untouched(self):
        assert strip_markdown("BEFORE_AFTER") == "BEFORE_AFTER"


class TestScan:
    def test_marker_kinds(self):
        lines = scan("SCORE: 80\nSTRENGTHS:\n- Dobra struktura", CORE_GRAMMAR)
        assert [(line.kind, line.marker, line.value) for line in lines] == [
            (LineKind.FIELD, "SCORE", "80"),
            (LineKind.SECTION, "STRENGTHS", ""),
            (LineKind.ITEM, "", "Dobra struktura"),
        ]

    def test_decorated_markers(self):
        lines = scan("**SCORE:** 80\n## FEEDBACK: Dobrze", CORE_GRAMMAR)
        assert [(line.marker, line.value) for line in lines] == [("SCORE", "80"), ("FEEDBACK", "Dobrze")]

    def test_unknown_marker_is_text(self):
        lines = scan("NOTE: coś", CORE_GRAMMAR)
        assert lines[0].kind == LineKind.TEXT

    def test_continuation_until_blank_line(self):
        lines = scan("FEEDBACK: Pierwsza\ndruga linia\n\nluźny tekst", CORE_GRAMMAR)
        assert lines[0].value == "Pierwsza druga linia"
        assert lines[1].kind == LineKind.TEXT

    def test_score_does_not_continue(self):
        lines = scan("SCORE: 80\ndodatkowy tekst", CORE_GRAMMAR)
        assert lines[0].value == "80"
        assert lines[1].kind == LineKind.TEXT

    def test_item_markers(self):
        lines = scan("- a\n* b\n• c\n1. d\n2) e", CORE_GRAMMAR)
        assert [line.value for line in lines] == ["a", "b", "c", "d", "e"]
        assert {line.kind for line in lines} == {LineKind.ITEM}

    def test_split_fields(self):
        assert split_fields(" a | **b** |c ") == ["a", "b", "c"]


class TestParseScore:
    def test_plain(self):
        assert parse_score("72") == 72

    def test_with_suffix(self):
        assert parse_score("72/100") == 72

    def test_clamped(self):
        assert parse_score("140") == 100
        assert parse_score("-5") == 0

    def test_unparsable(self):
        assert parse_score("brak") == 50


class TestParseCoreAnalysis:
    def test_full_answer(self):
        core = parse_core_analysis(CORE_ANSWER)
        assert core.overall_score == 72
        assert core.general_feedback == "Cennik jest dobrze zorganizowany, ale wymaga poprawy opisów usług."
        assert core.sales_potential == "Średni - brak wyróżników i pakietów"
        assert core.strengths == ["Przejrzysta struktura", "Zróżnicowane usługi"]
        assert [(w.point, w.consequence) for w in core.weaknesses] == [
            ("Brak opisów", "Klient nie wie co dostanie"),
            ("Zbyt techniczne nazwy", "Odpycha laików"),
        ]

    def test_weakness_without_consequence(self):
        core = parse_core_analysis("WEAKNESSES:\n- Brak cen")
        assert core.weaknesses[0].point == "Brak cen"
        assert core.weaknesses[0].consequence == DEFAULT_CONSEQUENCE

    def test_empty_answer_defaults(self):
        core = parse_core_analysis("")
        assert core.overall_score == 50
        assert core.sales_potential == "Średni"
        assert core.strengths == [PLACEHOLDER_STRENGTH]
        assert len(core.weaknesses) == 1

    def test_items_outside_sections_ignored(self):
        core = parse_core_analysis("- zabłąkany punkt\nSTRENGTHS:\n- Mocna strona")
        assert core.strengths == ["Mocna strona"]


class TestParseRecommendations:
    def test_full_answer(self):
        recs = parse_recommendations(RECOMMENDATIONS_ANSWER, "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.recommendations == ["Dodaj opisy korzyści", "Stwórz pakiety", "Ujednolić nazewnictwo"]
        assert recs.before_after.after == "Mikrodermabrazja - Głębokie oczyszczenie i wygładzenie skóry"
        assert recs.before_after.explanation == "Dodanie korzyści zwiększa konwersję"

    def test_before_uses_listing_spelling(self):
        recs = parse_recommendations(RECOMMENDATIONS_ANSWER, "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.before_after.before == "Mikrodermabrazja"

    def test_invented_before_replaced_by_sample(self):
        text = "BEFORE_AFTER:\nBEFORE: Lifting laserowy premium\nAFTER: Lepsza nazwa"
        recs = parse_recommendations(text, "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.before_after.before == "Oczyszczanie twarzy"
        assert recs.before_after.after == "Lepsza nazwa"

    def test_quoted_before_matched(self):
        text = 'BEFORE: "Manicure  klasyczny"'
        recs = parse_recommendations(text, "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.before_after.before == "Manicure klasyczny"

    def test_defaults(self):
        recs = parse_recommendations("", "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.recommendations == [PLACEHOLDER_RECOMMENDATION]
        assert recs.before_after.before == "Oczyszczanie twarzy"
        assert recs.before_after.after == "Oczyszczanie twarzy" + DEFAULT_AFTER_SUFFIX
        assert recs.before_after.explanation == DEFAULT_EXPLANATION

    def test_explanation_continues_on_next_line(self):
        text = "EXPLANATION: Nazwa mówi\no korzyściach dla klientki"
        recs = parse_recommendations(text, "Oczyszczanie twarzy", KNOWN_NAMES)
        assert recs.before_after.explanation == "Nazwa mówi o korzyściach dla klientki"


class TestParseGrowthTips:
    def test_full_answer(self):
        tips = parse_growth_tips(TIPS_ANSWER)
        assert [t.category for t in tips] == [
            GrowthTipCategory.SEO,
            GrowthTipCategory.CONVERSION,
            GrowthTipCategory.RETENTION,
            GrowthTipCategory.IMAGE,
        ]
        assert tips[0].title == "Słowa kluczowe w nazwach"
        assert tips[0].impact == GrowthTipImpact.HIGH
        assert tips[3].impact == GrowthTipImpact.LOW

    def test_unknown_labels_repaired(self):
        tips = parse_growth_tips("TIP: Marketing | Tytuł | Opis | Ogromny")
        assert tips[0].category == GrowthTipCategory.CONVERSION
        assert tips[0].impact == GrowthTipImpact.MEDIUM

    def test_english_aliases_and_brackets(self):
        tips = parse_growth_tips("TIP: [Retention] | Tytuł | Opis | [high]")
        assert tips[0].category == GrowthTipCategory.RETENTION
        assert tips[0].impact == GrowthTipImpact.HIGH

    def test_impact_without_diacritics(self):
        tips = parse_growth_tips("TIP: SEO | Tytuł | Opis | Sredni")
        assert tips[0].impact == GrowthTipImpact.MEDIUM

    def test_too_few_fields_skipped(self):
        tips = parse_growth_tips("TIP: SEO | Tytuł | Opis\nTIP: SEO | Dobry | Opis | Niski")
        assert [t.title for t in tips] == ["Dobry"]

    def test_placeholder_when_nothing_parsed(self):
        tips = parse_growth_tips("Brak porad.")
        assert len(tips) == 1
        assert tips[0].category == GrowthTipCategory.SEO

    def test_capped_at_four(self):
        text = "\n".join(f"TIP: SEO | Porada {i} | Opis | Niski" for i in range(6))
        assert len(parse_growth_tips(text)) == 4
