from sitelang.excerpt import reconstruct_excerpt, truncate_translation
from sitelang.matcher import make_candidate


ORIGINAL = "a" * 99 + "b"
TRANSLATION = (
    "Bonjour tout le monde. Ceci est un test de traduction qui continue "
    "encore longtemps ici pour remplir la phrase."
)


def test_prefix_with_ellipsis_below_ratio_is_accepted():
    cand = make_candidate(ORIGINAL, TRANSLATION, 0)
    out = reconstruct_excerpt(ORIGINAL[:55] + "…", [cand])
    assert out
    assert out.endswith("…")
    assert len(out) < len(TRANSLATION)


def test_prefix_without_ellipsis_below_ratio_is_rejected():
    cand = make_candidate(ORIGINAL, TRANSLATION, 0)
    assert reconstruct_excerpt(ORIGINAL[:55], [cand]) is None


def test_near_full_prefix_uses_whole_translation():
    cand = make_candidate(ORIGINAL, TRANSLATION, 0)
    assert reconstruct_excerpt(ORIGINAL[:99], [cand]) == TRANSLATION


def test_outer_whitespace_is_preserved():
    cand = make_candidate(ORIGINAL, TRANSLATION, 0)
    out = reconstruct_excerpt("\n  " + ORIGINAL[:70] + "…  ", [cand])
    assert out.startswith("\n  ")
    assert out.endswith("…  ")


def test_wordpress_excerpt_tail_is_reused():
    original = "First sentence is here. Second sentence follows with more words in it."
    cand = make_candidate(original, "Première phrase ici. Deuxième phrase avec plus de mots.", 0)
    out = reconstruct_excerpt("First sentence is here. Second sentence [&hellip;]", [cand])
    assert out.endswith(" [&hellip;]")
    assert out.startswith("Première phrase")


def test_highest_ratio_candidate_wins():
    short = make_candidate("Welcome to the shop", "Bienvenue dans la boutique", 0)
    long = make_candidate("Welcome to the shop and the cafe downstairs", "Autre", 1)
    assert reconstruct_excerpt("Welcome to the shop…", [long, short]) == "Bienvenue dans la boutique"


def test_no_prefix_relationship_returns_none():
    cand = make_candidate("Something else entirely", "Autre chose", 0)
    assert reconstruct_excerpt("Welcome…", [cand]) is None
    assert reconstruct_excerpt("   ", [cand]) is None


def test_truncate_prefers_sentence_boundary_before_target():
    text = "One two three. Four five six seven eight nine."
    assert truncate_translation(text, 0.3) == "One two three."


def test_truncate_accepts_boundary_slightly_after_target():
    text = "Alpha beta gamma delta. Epsilon."
    assert truncate_translation(text, 0.6) == "Alpha beta gamma delta."


def test_truncate_falls_back_to_word_boundary():
    text = "alpha beta gamma delta epsilon zeta"
    assert truncate_translation(text, 0.5) == "alpha beta gamma"


def test_truncate_raw_cut_without_spaces():
    text = "这是一个很长的句子没有标点符号用于测试截"
    assert len(truncate_translation(text, 0.5)) == 10


def test_truncate_never_splits_protected_token():
    text = "Hello __SCx_0__ world"
    assert truncate_translation(text, 0.5, ("__SCx_0__",)) == "Hello"


def test_excerpt_extends_to_keep_placeholder():
    original = "Hello __P0__ world and plenty of further words to pad this sentence out"
    translation = "Bonjour le monde et beaucoup d'autres mots pour remplir, puis __P0__ enfin."
    cand = make_candidate(original, translation, 0)
    out = reconstruct_excerpt("Hello __P0__ world…", [cand], ("__P0__",))
    assert out == "Bonjour le monde et beaucoup d'autres mots pour remplir, puis __P0__…"


def test_excerpt_declined_when_placeholder_missing_from_translation():
    cand = make_candidate("Hello __P0__ world and more", "Bonjour le monde et plus", 0)
    assert reconstruct_excerpt("Hello __P0__ world…", [cand], ("__P0__",)) is None


def test_sentence_excerpt_gets_no_extra_ellipsis():
    original = "Phrase one is short. Phrase two is a much longer sentence that goes on."
    translation = "Première phrase courte. Deuxième phrase beaucoup plus longue qui continue encore."
    cand = make_candidate(original, translation, 0)
    assert reconstruct_excerpt("Phrase one is short. Phrase two…", [cand]) == "Première phrase courte."
    assert reconstruct_excerpt("Phrase one is short. Phrase two...", [cand]) == "Première phrase courte."
