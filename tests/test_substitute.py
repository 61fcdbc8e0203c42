from sitelang.shortcodes import RegisteredShortcodes
from sitelang.substitute import build_candidates, substitute
from sitelang.tokenizer import markup_texts, split_html


def test_script_content_is_untouched():
    doc = '<p>Welcome home!</p><script>var x="Welcome home!";</script>'
    out = substitute(doc, "fr", [("Welcome home!", "Bienvenue!")])
    assert out == '<p>Bienvenue!</p><script>var x="Welcome home!";</script>'


def test_attributes_are_never_rewritten():
    doc = '<a title="Welcome home!" href="/">Welcome home!</a>'
    out = substitute(doc, "fr", [("Welcome home!", "Bienvenue!")])
    assert out == '<a title="Welcome home!" href="/">Bienvenue!</a>'
    assert markup_texts(split_html(out)) == markup_texts(split_html(doc))


def test_entity_encoded_text_is_matched():
    out = substitute("<p>It&#8217;s great</p>", "fr", [("It's great", "C'est super")])
    assert out == "<p>C'est super</p>"


def test_shortcodes_survive_round_trip():
    doc = "<p>Hello [button]Click[/button] there</p>"
    pairs = [("Hello [button]Click[/button] there", "Bonjour [button]Click[/button] là")]
    assert substitute(doc, "fr", pairs) == "<p>Bonjour [button]Click[/button] là</p>"
    grammar = RegisteredShortcodes(("button",))
    assert substitute(doc, "fr", pairs, grammar=grammar) == "<p>Bonjour [button]Click[/button] là</p>"


def test_translation_dropping_shortcodes_is_not_applied():
    doc = "<p>See [x] and [x] now</p>"
    out = substitute(doc, "fr", [("See [x] and [x] now", "Voir [x] maintenant")])
    assert out == doc


def test_longest_overlapping_match_wins():
    doc = "<p>Welcome home friends</p>"
    pairs = [("Welcome", "Bienvenue"), ("Welcome home", "Bienvenue chez vous")]
    assert substitute(doc, "fr", pairs) == "<p>Bienvenue chez vous friends</p>"


def test_excerpt_paragraph_gets_truncated_translation():
    original = (
        "Our shop sells handmade ceramic bowls. Every piece is glazed by hand "
        "in our small studio. We ship worldwide."
    )
    translated = (
        "Notre boutique vend des bols en céramique faits main. Chaque pièce est "
        "émaillée à la main dans notre petit atelier. Nous expédions partout."
    )
    doc = (
        "<p>Our shop sells handmade ceramic bowls. Every piece is glazed by hand "
        "in our small studio [&hellip;]</p>"
    )
    out = substitute(doc, "fr", [(original, translated)])
    assert out.startswith("<p>Notre boutique")
    assert out.endswith(" [&hellip;]</p>")


def test_short_coincidental_prefix_is_left_alone():
    doc = "<p>Welcome</p>"
    out = substitute(doc, "fr", [("Welcome to our wonderful shop", "Bienvenue dans notre boutique")])
    assert out == doc


def test_no_usable_pairs_returns_document():
    doc = "<p>Hello</p>"
    assert substitute(doc, "fr", []) == doc
    assert substitute(doc, "fr", [("Hello", "Hello"), ("", "x"), ("[gallery]", "[gallery]")]) == doc
    assert substitute("", "fr", [("a", "b")]) == ""


def test_build_candidates_orders_by_length_and_masks():
    reverse = {"[b]": "__P0__"}
    candidates = build_candidates(
        [("Hi", "Salut"), ("Hello [b] there", "Bonjour [b] là"), ("Hi", "Coucou")],
        reverse,
    )
    assert [c.search_text for c in candidates] == ["Hello __P0__ there", "Hi"]
    assert candidates[0].replacement == "Bonjour __P0__ là"
    assert candidates[1].replacement == "Salut"
    assert [c.priority for c in candidates] == [0, 1]


def test_placeholder_digits_are_never_rewritten():
    out = substitute("<p>[gallery] Page 0</p>", "fr", [("0", "zéro")])
    assert out == "<p>[gallery] Page zéro</p>"


def test_excerpt_keeps_shortcode_shown_in_segment():
    original = "Click [button] to buy our excellent handmade bowls and enjoy them every day at home."
    translated = (
        "Pour acheter nos excellents bols faits main et en profiter chaque jour "
        "chez vous, cliquez [button]."
    )
    doc = "<p>Click [button] to buy our excellent handmade bowls&hellip;</p>"
    out = substitute(doc, "fr", [(original, translated)])
    assert out.startswith("<p>Pour acheter")
    assert "[button]" in out
    assert out.endswith("&hellip;</p>")
