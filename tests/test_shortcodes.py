from sitelang.shortcodes import (
    RegisteredShortcodes,
    apply_reverse,
    grammar_for,
    is_directives_only,
    mask,
    missing_directives,
    preserves_directives,
    unmask,
)


def test_mask_without_shortcodes_returns_text_unchanged():
    result = mask("Plain <b>text</b> with [1] citation")
    assert result.text == "Plain <b>text</b> with [1] citation"
    assert result.placeholders == {}
    assert result.reverse == {}


def test_mask_roundtrip_reuses_placeholder_for_repeats():
    text = 'A [gallery] B [gallery] C [button color="red"]Go[/button]'
    result = mask(text)
    assert "[gallery]" not in result.text
    assert len(result.placeholders) == 3
    gallery_key = result.reverse["[gallery]"]
    assert result.text.count(gallery_key) == 2
    assert unmask(result.text, result.placeholders) == text


def test_placeholders_are_unique_to_the_text():
    text = "Intro [contact-form id=3] outro"
    result = mask(text)
    for key in result.placeholders:
        assert key.startswith("__SC")
        assert key.endswith("__")
        assert key not in text


def test_registered_grammar_masks_enclosing_shortcode_as_one_token():
    grammar = RegisteredShortcodes(("button",))
    result = mask("Hello [button]Click[/button] there [other]", grammar)
    assert list(result.placeholders.values()) == ["[button]Click[/button]"]
    assert "[other]" in result.text


def test_grammar_for_empty_names_falls_back_to_generic():
    assert grammar_for([]) is None
    assert grammar_for([" ", ""]) is None
    assert isinstance(grammar_for(["gallery"]), RegisteredShortcodes)


def test_is_directives_only():
    assert is_directives_only('[gallery] [gallery ids="1,2"]')
    assert not is_directives_only("[gallery] Photos")
    assert is_directives_only("   ")


def test_preserves_directives_counts_occurrences():
    assert preserves_directives("See [x] and [x]", "Voir [x] et [x]")
    assert not preserves_directives("See [x] and [x]", "Voir [x]")
    assert preserves_directives("No shortcodes", "Pas de shortcodes")
    assert missing_directives("See [x] and [y]", "Voir [x]") == {"[y]"}


def test_apply_reverse_prefers_longest_token():
    reverse = {"[b]": "__P0__", "[b]x[/b]": "__P1__"}
    assert apply_reverse("[b]x[/b] [b]", reverse) == "__P1__ __P0__"
