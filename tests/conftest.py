import pytest

from salon_audit.core.config import settings

# Override settings for tests
settings.app_env = "test"
settings.gemini_api_key = "test-gemini-key"
settings.audit_retry_base_delay = 30

from salon_audit.llm.base import BaseLlmClient, LlmResponse  # noqa: E402

SIMPLE_LISTING = """
# Studio Urody Bella

Adres: ul. Kwiatowa 15, Warszawa

## Zabiegi na twarz

Oczyszczanie twarzy - 150 zł 60 min
Profesjonalne oczyszczanie skóry z peelingiem

Mikrodermabrazja - 200 zł 45 min

## Manicure

Manicure klasyczny - 80 zł 30 min
Manicure hybrydowy - 120 zł 45 min
"""

COMPLEX_LISTING = """
# Salon Piękności Glamour

Lokalizacja: Al. Jerozolimskie 100, 00-001 Warszawa

## Fryzjerstwo damskie

**Strzyżenie damskie** - 120 zł
Strzyżenie z modelowaniem dla wszystkich typów włosów

1. Koloryzacja całkowita - 250 zł 120 min
2. Balayage - 350 zł 180 min
3. Tonowanie - 100 zł 45 min

## Fryzjerstwo męskie

Strzyżenie męskie klasyczne - 50 zł 30 min
Strzyżenie maszynką - 40 zł 20 min
Strzyżenie z brodą - 80 zł 45 min

## Kosmetyka

Peeling kawitacyjny – 180 zł
Zabieg nawilżający – 220 zł
Mezoterapia igłowa - 400 zł
"""

SAMPLE_HTML = """
<div class="service-item">
  <h3 class="service-name">Manicure hybrydowy</h3>
  <span class="price">120 zł</span>
  <span class="duration">45 min</span>
</div>
<li class="offer-item">
  <strong>Pedicure spa</strong>
  <span>150 PLN</span>
</li>
<article class="service">
  <p class="title">Depilacja nogi</p>
  <span>200 zł</span>
  <span>60 min</span>
</article>
"""

CORE_ANSWER = """\
**SCORE:** 72
FEEDBACK: Cennik jest dobrze zorganizowany,
ale wymaga poprawy opisów usług.
POTENTIAL: Średni - brak wyróżników i pakietów

STRENGTHS:
- Przejrzysta struktura
- Zróżnicowane usługi

WEAKNESSES:
- Brak opisów | Klient nie wie co dostanie
- Zbyt techniczne nazwy | Odpycha laików
"""

RECOMMENDATIONS_ANSWER = """\
RECOMMENDATIONS:
- Dodaj opisy korzyści
- Stwórz pakiety
- Ujednolić nazewnictwo

BEFORE_AFTER:
BEFORE: mikrodermabrazja
AFTER: Mikrodermabrazja - Głębokie oczyszczenie i wygładzenie skóry
EXPLANATION: Dodanie korzyści zwiększa konwersję
"""

TIPS_ANSWER = """\
TIP: SEO | Słowa kluczowe w nazwach | Dodaj frazy wyszukiwane przez klientki | Wysoki
TIP: Konwersja | Pakiety usług | Połącz zabiegi w pakiety z rabatem | Średni
TIP: Retencja | Karnety | Zaproponuj karnety na serie zabiegów | Średni
TIP: Wizerunek | Zdjęcia efektów | Dodaj zdjęcia przed i po | Niski
"""


class ScriptedLlmClient(BaseLlmClient):
    """Returns canned answers in order and records every prompt it receives."""

    provider = "scripted"

    def __init__(self, answers: list[str | Exception]):
        super().__init__(api_key="test", model="scripted-model")
        self.answers = list(answers)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> LlmResponse:
        self.prompts.append(prompt)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return LlmResponse(text=answer, model=self.model, tokens=100)


@pytest.fixture
def scripted_client():
    """Client answering the three report calls with well-formed micro-format text."""
    return ScriptedLlmClient([CORE_ANSWER, RECOMMENDATIONS_ANSWER, TIPS_ANSWER])
