from countrieslib.pipeline.text_clean import trim_html


def test_removes_html():
    assert "hello" == trim_html("<b>hello</b>")


def test_removes_scripts_and_styles():
    body = "<style>h1 {color: red}</style><script>alert(1)</script><p>Bad gateway</p>"
    assert "Bad gateway" == trim_html(body)


def test_collapses_whitespace():
    assert "a b c" == trim_html("a \n  b\t  c")


def test_truncates_long_bodies():
    assert "abcde..." == trim_html("abcdefghij", max_length=5)


def test_non_string_passthrough():
    assert trim_html(None) is None
    assert trim_html({"error": "x"}) == {"error": "x"}
