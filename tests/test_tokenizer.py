from sitelang.tokenizer import Segment, SegmentKind, join_segments, markup_texts, split_html


def _texts(segments):
    return [(s.text, s.kind, s.eligible) for s in segments]


def test_split_marks_markup_and_text():
    segments = split_html("<p>Hi</p>")
    assert _texts(segments) == [
        ("<p>", SegmentKind.MARKUP, False),
        ("Hi", SegmentKind.TEXT, True),
        ("</p>", SegmentKind.MARKUP, False),
    ]


def test_script_and_style_content_is_suppressed():
    html = '<p>a</p><script>var x = "a";</script><style>p{}</style>b'
    segments = split_html(html)
    text_segments = [(s.text, s.eligible) for s in segments if s.kind is SegmentKind.TEXT]
    assert text_segments == [("a", True), ('var x = "a";', False), ("p{}", False), ("b", True)]
    assert join_segments(segments) == html


def test_suppression_is_case_insensitive_and_needs_matching_close():
    html = '<SCRIPT type="text/javascript">x</style>y</Script>z'
    segments = split_html(html)
    text_segments = [(s.text, s.eligible) for s in segments if s.kind is SegmentKind.TEXT]
    assert text_segments == [("x", False), ("y", False), ("z", True)]


def test_self_closing_script_does_not_suppress():
    segments = split_html('<script src="a.js" />text')
    assert segments[-1] == Segment("text", SegmentKind.TEXT, True)


def test_plain_and_empty_input_is_single_segment():
    assert split_html("just text") == [Segment("just text", SegmentKind.TEXT, True)]
    assert split_html("") == [Segment("", SegmentKind.TEXT, True)]


def test_failing_splitter_degrades_to_single_segment():
    def _broken(html):
        raise ValueError("boom")

    assert split_html("<p>x</p>", splitter=_broken) == [
        Segment("<p>x</p>", SegmentKind.TEXT, True)
    ]


def test_markup_texts():
    assert markup_texts(split_html('<a href="/">x</a>')) == ['<a href="/">', "</a>"]
