"""Prompt templates for the three report calls.

Every prompt spells out the micro-format it expects back and carries
GRAMMAR_VERSION, so a prompt change and a parser change ship together.
"""

from __future__ import annotations

from salon_audit.audit.microformat import GRAMMAR_VERSION
from salon_audit.audit.types import ScrapedDocument

# Summary limits keep prompts small on large listings
MAX_SUMMARY_CATEGORIES = 10
MAX_SUMMARY_SERVICES_PER_CATEGORY = 5
SUMMARY_DESCRIPTION_CHARS = 50

FALLBACK_SAMPLE_NAME = "Zabieg kosmetyczny"

_FORMAT_FOOTER = f"""\
WAŻNE: Nie używaj JSON ani emoji. Odpowiedz dokładnie w podanym formacie tekstowym.
[format: {GRAMMAR_VERSION}]"""

CORE_ANALYSIS_TEMPLATE = """\
Jesteś audytorem cenników salonów beauty.

{summary}

ZADANIE: Oceń cennik i odpowiedz w formacie:

SCORE: [liczba 0-100]
FEEDBACK: [2-3 zdania podsumowania]
POTENTIAL: [Niski/Średni/Wysoki] - [krótkie uzasadnienie]

STRENGTHS:
- [mocna strona 1]
- [mocna strona 2]
- [mocna strona 3]

WEAKNESSES:
- [problem 1] | [konsekwencja dla klienta]
- [problem 2] | [konsekwencja dla klienta]
- [problem 3] | [konsekwencja dla klienta]

""" + _FORMAT_FOOTER

RECOMMENDATIONS_TEMPLATE = """\
Jesteś ekspertem od optymalizacji cenników beauty.

{summary}

ZADANIE: Podaj rekomendacje i przykład poprawy.

RECOMMENDATIONS:
- [konkretna rekomendacja 1]
- [konkretna rekomendacja 2]
- [konkretna rekomendacja 3]
- [konkretna rekomendacja 4]
- [konkretna rekomendacja 5]

BEFORE_AFTER:
BEFORE: {sample_name}
AFTER: [poprawiona wersja nazwy "{sample_name}"]
EXPLANATION: [dlaczego zmiana jest lepsza]

Rekomendacje muszą być konkretne i praktyczne.
W BEFORE użyj dokładnie nazwy "{sample_name}" z oryginalnego cennika.
""" + _FORMAT_FOOTER

GROWTH_TIPS_TEMPLATE = """\
Jesteś strategiem marketingu dla salonów beauty.

{summary}

ZADANIE: Podaj 4 porady wzrostu dla tego salonu.

FORMAT (każda porada w nowej linii):
TIP: [SEO/Konwersja/Retencja/Wizerunek] | [tytuł porady] | [opis 1-2 zdania] | [Wysoki/Średni/Niski]

Przykład:
TIP: SEO | Słowa kluczowe w nazwach | Dodaj popularne frazy jak "lifting" czy "odmładzanie" do nazw usług | Wysoki

Podaj dokładnie 4 porady, każda w formacie TIP:
""" + _FORMAT_FOOTER


def build_pricelist_summary(document: ScrapedDocument) -> str:
    """Condensed view of the listing: a few services from the first categories."""
    lines = [
        f"SALON: {document.salon_name or 'Nieznany'}",
        f"ADRES: {document.salon_address or 'Nieznany'}",
        f"STATYSTYKI: {len(document.categories)} kategorii, {document.total_service_count} usług",
        "",
        "PRZYKŁADOWE USŁUGI:",
    ]

    for category in document.categories[:MAX_SUMMARY_CATEGORIES]:
        lines.append("")
        lines.append(f"## {category.name} ({len(category.services)} usług)")
        for service in category.services[:MAX_SUMMARY_SERVICES_PER_CATEGORY]:
            entry = f"- {service.name}: {service.price}"
            if service.duration:
                entry += f" ({service.duration})"
            if service.description:
                entry += f" - {service.description[:SUMMARY_DESCRIPTION_CHARS]}..."
            lines.append(entry)
        hidden = len(category.services) - MAX_SUMMARY_SERVICES_PER_CATEGORY
        if hidden > 0:
            lines.append(f"  ... i {hidden} więcej usług")

    hidden_categories = len(document.categories) - MAX_SUMMARY_CATEGORIES
    if hidden_categories > 0:
        lines.append("")
        lines.append(f"... i {hidden_categories} więcej kategorii")

    return "\n".join(lines)


def sample_service_name(document: ScrapedDocument) -> str:
    """Name used as the "before" example: the first service of the listing."""
    for service in document.iter_services():
        return service.name
    return FALLBACK_SAMPLE_NAME


def build_core_analysis_prompt(summary: str) -> str:
    return CORE_ANALYSIS_TEMPLATE.format(summary=summary)


def build_recommendations_prompt(summary: str, sample_name: str) -> str:
    return RECOMMENDATIONS_TEMPLATE.format(summary=summary, sample_name=sample_name)


def build_growth_tips_prompt(summary: str) -> str:
    return GROWTH_TIPS_TEMPLATE.format(summary=summary)
