from statement_import.categorization import CategoryMatcher, keyword_variations, match_category
from statement_import.models import Category, CategoryType


def _cat(name: str, *keywords: str, type_: CategoryType = CategoryType.EXPENSE) -> Category:
    return Category(id=f"cat-{name.lower()}", name=name, keywords=keywords, type=type_)


def test_longer_whole_word_keyword_wins_over_shorter_one():
    cats = [_cat("Resta"), _cat("Restaurante", "restaurantes")]
    assert match_category("Cena en Restaurantes XYZ", cats) == "Restaurante"


def test_substring_fallback_when_no_whole_word_match():
    cats = [_cat("Supermercado", "mercadona")]
    assert match_category("COMPRA TARJ MERCADONA123 VALENCIA", cats) == "Supermercado"


def test_whole_word_pass_beats_earlier_substring_candidate():
    # "gasolinera" is longer and only a substring here; "bar" is a whole word.
    cats = [_cat("Coche", "gasolinera"), _cat("Ocio", "bar")]
    assert match_category("GASOLINERAS REPSOL BAR CENTRAL", cats) == "Ocio"


def test_plural_keyword_matches_singular_description():
    cats = [_cat("Comida", "restaurantes")]
    assert match_category("Pago restaurante La Tasca", cats) == "Comida"


def test_category_name_is_an_implicit_keyword_and_accents_are_ignored():
    cats = [_cat("Nómina", type_=CategoryType.INCOME)]
    assert match_category("TRANSFERENCIA NOMINA OCTUBRE", cats) == "Nómina"


def test_no_match_returns_empty_string():
    cats = [_cat("Viajes", "vuelo", "hotel")]
    assert match_category("Compra libreria", cats) == ""
    assert match_category("", cats) == ""
    assert match_category("anything", []) == ""


def test_equal_length_keywords_keep_category_order():
    cats = [_cat("A", "pago"), _cat("B", "pago")]
    assert match_category("pago con tarjeta", cats) == "A"


def test_keyword_variations():
    assert keyword_variations("Restaurantes") == ("restaurantes", "restaurant")
    assert keyword_variations("Cafés") == ("cafes", "caf")
    assert keyword_variations("bus") == ("bus",)
    assert keyword_variations("Taxis") == ("taxis", "taxi")


def test_explain_reports_the_winning_pass():
    matcher = CategoryMatcher([_cat("Supermercado", "mercadona")])
    assert matcher.explain("MERCADONA S.A.") == ("Supermercado", "mercadona", "word")
    assert matcher.explain("XMERCADONAX") == ("Supermercado", "mercadona", "substring")
    assert matcher.explain("nothing") is None


def test_regex_metacharacters_in_keywords_are_literal():
    cats = [_cat("Tech", "c++"), _cat("Shop", "amazon.es")]
    assert match_category("Curso c++ online", cats) == "Tech"
    assert match_category("AMAZON.ES MARKETPLACE", cats) == "Shop"
    assert match_category("amazonxes", cats) == ""
