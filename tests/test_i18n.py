import pytest

from tripsplit.i18n import (
    Args,
    Context,
    Localizer,
    Translatable,
    available_langs,
    get_localizer,
    is_lang_available,
    set_localizer,
    translate,
    translate_default,
)

EN = """
# Greetings
hello = Hello
greet = Hi { $name }!
usage = Use /{ -add-expense-command } to start
multi =
    Line one
    Line two
role = { $traveler-is ->
        [creditor] { $name } is owed
       *[debtor] { $name } owes
    }
count = { $number ->
        [0] nothing
       *[other] { $number } items
    }
nested = { hello }, world
brace = Open { "{" } close
-brand = TripSplit
about = About { -brand }
"""

IT = """
hello = Ciao
greet = Ciao { $name }!
"""


@pytest.fixture
def localizer():
    previous = get_localizer()
    loc = Localizer("en-US", {"en-US": EN, "it-IT": IT})
    set_localizer(loc)
    yield loc
    set_localizer(previous)


class _Greeting(Translatable):
    def __init__(self, name):
        self.name = name

    def translate(self, ctx):
        return translate(ctx, "greet", {"name": self.name})


def test_simple_message(localizer):
    assert localizer.lookup("en-US", "hello") == "Hello"
    assert localizer.lookup("it-IT", "hello") == "Ciao"


def test_variable_substitution(localizer):
    assert localizer.lookup("en-US", "greet", {"name": "Alice"}) == "Hi Alice!"


def test_missing_variable_is_marked(localizer):
    assert localizer.lookup("en-US", "greet") == "Hi {$name}!"


def test_builtin_command_term(localizer):
    assert localizer.lookup("en-US", "usage") == "Use /addexpense to start"


def test_multiline_value_is_dedented(localizer):
    assert localizer.lookup("en-US", "multi") == "Line one\nLine two"


def test_select_expression(localizer):
    creditor = localizer.lookup(
        "en-US", "role", {Args.TRAVELER_IS: Args.TRAVELER_IS_CASE_CREDITOR, "name": "Bob"}
    )
    debtor = localizer.lookup(
        "en-US", "role", {Args.TRAVELER_IS: Args.TRAVELER_IS_CASE_DEBTOR, "name": "Bob"}
    )
    assert creditor == "Bob is owed"
    assert debtor == "Bob owes"


def test_select_default_variant(localizer):
    assert localizer.lookup("en-US", "role", {Args.TRAVELER_IS: "x", "name": "Ann"}) == "Ann owes"


def test_numeric_select(localizer):
    assert localizer.lookup("en-US", "count", {"number": 0}) == "nothing"
    assert localizer.lookup("en-US", "count", {"number": 3}) == "3 items"


def test_message_and_term_references(localizer):
    assert localizer.lookup("en-US", "nested") == "Hello, world"
    assert localizer.lookup("en-US", "about") == "About TripSplit"


def test_string_literal_placeable(localizer):
    assert localizer.lookup("en-US", "brace") == "Open { close"


def test_fallback_locale_used_for_missing_message(localizer):
    assert localizer.lookup("it-IT", "multi") == localizer.lookup("en-US", "multi")


def test_region_falls_back_to_language():
    loc = Localizer("en-US", {"en-US": EN, "it": IT})
    assert loc.lookup("it-CH", "hello") == "Ciao"


def test_unknown_key(localizer):
    assert localizer.lookup("en-US", "missing-key") is None
    assert translate(Context(langid="en-US"), "missing-key") == "missing-key"


def test_invalid_langid_raises(localizer):
    with pytest.raises(ValueError):
        localizer.lookup("!!", "hello")


def test_translate_uses_context_language(localizer):
    assert translate(Context(langid="it-IT"), "greet", {"name": "Bob"}) == "Ciao Bob!"
    assert translate_default("greet", {"name": "Bob"}) == "Hi Bob!"


def test_context_default_language_is_fallback(localizer):
    assert Context().langid == localizer.fallback


def test_translatable_default_and_str(localizer):
    greeting = _Greeting("Bob")
    assert greeting.translate_default() == "Hi Bob!"
    assert str(greeting) == greeting.translate_default()
    assert greeting.translate(Context(langid="it-IT")) == "Ciao Bob!"


def test_language_availability(localizer):
    assert is_lang_available("en-us")
    assert is_lang_available("it-IT")
    assert not is_lang_available("fr-FR")
    assert not is_lang_available("!!")
    assert set(available_langs()) == {"en-US", "it-IT"}


def test_add_messages_overrides_and_keeps_others(localizer):
    localizer.add_messages("en-US", "hello = Howdy")
    assert localizer.lookup("en-US", "hello") == "Howdy"
    assert localizer.lookup("en-US", "greet", {"name": "Al"}) == "Hi Al!"


def test_malformed_entry_is_skipped():
    loc = Localizer("en-US", {"en-US": "bad = { $\ngood = fine"})
    assert loc.lookup("en-US", "bad") is None
    assert loc.lookup("en-US", "good") == "fine"


def test_from_directory(tmp_path):
    (tmp_path / "en-US").mkdir()
    (tmp_path / "en-US" / "main.ftl").write_text(EN, encoding="utf-8")
    (tmp_path / "it-IT").mkdir()
    (tmp_path / "it-IT" / "main.ftl").write_text(IT, encoding="utf-8")
    loc = Localizer.from_directory(tmp_path, "en-US")
    assert set(loc.locales()) == {"en-US", "it-IT"}
    assert loc.lookup("it-IT", "hello") == "Ciao"