"""Token-level tests for the minifier pass."""

from __future__ import annotations

import unittest

from tersehtml import (
    BufferPool,
    CharacterTokens,
    CommentToken,
    DoctypeToken,
    Minifier,
    MinifySettings,
    Tag,
    compress_whitespace,
    minify_tokens,
    to_html,
    trim_style,
)
from tersehtml.minifier import is_conditional_comment, trim_indices


def text(data):
    return CharacterTokens(data)


def start(name, *attrs, self_closing=False):
    return Tag(Tag.START, name, list(attrs), self_closing)


def end(name):
    return Tag(Tag.END, name)


def run(tokens, **kwargs):
    return list(minify_tokens(tokens, **kwargs))


def render(tokens, **kwargs):
    return to_html(minify_tokens(tokens, **kwargs))


def texts(tokens):
    return [t.data for t in tokens if isinstance(t, CharacterTokens)]


class TestHelpers(unittest.TestCase):
    def test_trim_indices(self) -> None:
        assert trim_indices("") == (0, -1)
        assert trim_indices(None) == (0, -1)
        assert trim_indices("  ab ") == (2, 3)
        start, stop = trim_indices(" \t\n ")
        assert stop < start

    def test_trim_indices_ignores_nbsp(self) -> None:
        assert trim_indices("\u00a0a\u00a0") == (0, 2)

    def test_compress_returns_same_object_when_nothing_to_do(self) -> None:
        value = "already compact"
        assert compress_whitespace(value) is value

    def test_compress_collapses_runs(self) -> None:
        assert compress_whitespace("  a   b \n\t c  ") == "a b c"
        assert compress_whitespace("a\nb") == "a b"
        assert compress_whitespace("   ") == ""
        assert compress_whitespace("") == ""

    def test_compress_with_bounds(self) -> None:
        assert compress_whitespace("  x  y  ", 1, 5) == " x y"
        assert compress_whitespace("abc", 1, 1) == "b"

    def test_compress_keeps_nbsp(self) -> None:
        assert compress_whitespace("a\u00a0\u00a0b") == "a\u00a0\u00a0b"

    def test_trim_style(self) -> None:
        assert trim_style(" color:red; ; ") == "color:red"
        assert trim_style("color:red;;") == "color:red"
        assert trim_style(";;") == ""
        assert trim_style("") == ""
        assert trim_style(None) is None
        value = "a:b"
        assert trim_style(value) is value

    def test_trim_style_keeps_inner_structure(self) -> None:
        assert trim_style("  a: b ;  c:d ; ") == "a: b ;  c:d"

    def test_conditional_comment_detection(self) -> None:
        assert is_conditional_comment("[if IE]><p>x</p><![endif]")
        assert is_conditional_comment("  [if lt IE 9]>")
        assert is_conditional_comment("<![endif]")
        assert not is_conditional_comment(" note ")
        assert not is_conditional_comment("")


class TestWhitespaceCompaction(unittest.TestCase):
    def test_end_to_end_paragraph(self) -> None:
        tokens = [
            start("p"),
            text("  Hello   "),
            start("b"),
            text("world"),
            end("b"),
            text("  !  "),
            end("p"),
        ]
        assert render(tokens) == "<p>Hello <b>world</b> !</p>"

    def test_empty_text_produces_nothing(self) -> None:
        assert run([text(""), text(None)]) == []

    def test_leading_document_whitespace_is_dropped(self) -> None:
        assert texts(run([text("   x")])) == ["x"]

    def test_interior_runs_collapse(self) -> None:
        assert texts(run([text("a \n\t b   c")])) == ["a b c"]

    def test_owed_space_emitted_before_unspaced_text(self) -> None:
        assert texts(run([text("a "), text("b")])) == ["a", " ", "b"]

    def test_leading_run_becomes_single_space(self) -> None:
        assert texts(run([text("a"), text(" \n  b")])) == ["a", " b"]

    def test_whitespace_only_token_owes_one_space(self) -> None:
        out = run([text("a"), text("   "), text("   "), text("b")])
        assert texts(out) == ["a", " ", "b"]

    def test_block_level_end_tag_swallows_space(self) -> None:
        out = run([start("div"), text("a"), text("   "), end("div")])
        assert texts(out) == ["a"]
        assert to_html(out) == "<div>a</div>"

    def test_inline_end_tag_keeps_space(self) -> None:
        tokens = [start("span"), text("a"), text(" "), end("span"), text("b")]
        assert render(tokens) == "<span>a </span>b"

    def test_owed_space_before_start_tag(self) -> None:
        tokens = [text("a "), start("span"), text(" b")]
        assert render(tokens) == "a <span>b"

    def test_preserve_surrounding_space_tag_tie_break(self) -> None:
        # After the space written before <img>, a following space is recreated.
        tokens = [text("a "), start("img"), text(" b")]
        assert render(tokens) == "a <img> b"

    def test_doctype_settles_pending_space(self) -> None:
        out = run([text("a "), DoctypeToken("DOCTYPE html")])
        assert texts(out) == ["a", " "]
        assert isinstance(out[-1], DoctypeToken)

    def test_same_input_same_output(self) -> None:
        tokens = [start("p"), text(" a  b "), start("i"), text(" c "), end("i"), end("p")]
        assert render(tokens) == render(tokens)


class TestComments(unittest.TestCase):
    def test_plain_comment_is_dropped(self) -> None:
        out = run([text("x"), CommentToken(" note ")])
        assert not any(isinstance(t, CommentToken) for t in out)

    def test_conditional_comment_is_kept_verbatim(self) -> None:
        comment = CommentToken("[if IE]><p>x</p><![endif]")
        out = run([comment])
        assert out == [comment]
        assert out[0] is comment

    def test_dropped_comment_does_not_touch_pending_space(self) -> None:
        tokens = [text("a "), CommentToken(" note "), text(" b")]
        assert render(tokens) == "a b"

    def test_kept_comment_does_not_settle_pending_space(self) -> None:
        tokens = [text("a "), CommentToken("[if IE]>"), text("b")]
        assert render(tokens) == "a<!--[if IE]>--> b"


class TestRegions(unittest.TestCase):
    def test_preserve_region_text_is_verbatim(self) -> None:
        tokens = [start("pre"), text("  keep \n   this  "), end("pre")]
        assert render(tokens) == "<pre>  keep \n   this  </pre>"

    def test_preserve_region_survives_unrelated_tags(self) -> None:
        tokens = [start("pre"), start("b"), text("  x  "), end("b"), text(" y "), end("pre")]
        assert render(tokens) == "<pre><b>  x  </b> y </pre>"

    def test_region_closes_on_matching_end_tag(self) -> None:
        tokens = [start("pre"), text(" a "), end("pre"), text("  b  c")]
        assert render(tokens) == "<pre> a </pre>b c"

    def test_preserve_region_leaves_state_alone(self) -> None:
        tokens = [text("a"), start("textarea"), text(" x "), end("textarea"), text(" b")]
        assert render(tokens) == "a<textarea> x </textarea> b"

    def test_region_starts_after_the_tag(self) -> None:
        # The space owed before <pre> is settled by the normal path.
        tokens = [text("a "), start("pre"), text(" x ")]
        assert render(tokens) == "a <pre> x "

    def test_custom_preserve_tags(self) -> None:
        settings = MinifySettings(preserve_inner_space_tags=["code"])
        tokens = [start("code"), text("a   b"), end("code"), start("pre"), text("c   d"), end("pre")]
        assert render(tokens, settings=settings) == "<code>a   b</code><pre>c d</pre>"


class TestScripts(unittest.TestCase):
    def test_script_text_is_aggregated_into_one_call(self) -> None:
        calls = []

        def fake(stream):
            calls.append(stream.read())
            return "MIN"

        tokens = [start("script"), text("var a = 1;"), text("\nvar b = 2;"), end("script")]
        out = run(tokens, script_minifier=fake)
        assert calls == ["var a = 1;\nvar b = 2;"]
        assert [type(t) for t in out] == [Tag, CharacterTokens, Tag]
        assert out[1].data == "MIN"
        assert out[2].kind == Tag.END and out[2].name == "script"

    def test_empty_script_emits_no_text(self) -> None:
        calls = []

        def fake(stream):
            calls.append(stream.read())
            return ""

        out = run([start("script"), text(""), end("script")], script_minifier=fake)
        assert texts(out) == []
        assert calls == []

    def test_script_whitespace_is_not_compacted(self) -> None:
        seen = []

        def fake(stream):
            seen.append(stream.read())
            return seen[-1]

        run([start("script"), text("  a  \n  b  "), end("script")], script_minifier=fake)
        assert seen == ["  a  \n  b  "]

    def test_non_javascript_script_is_left_verbatim(self) -> None:
        def fail(stream):
            raise AssertionError("should not be called")

        body = ' {"a":  1} '
        tokens = [start("script", ("type", "application/ld+json")), text(body), end("script")]
        assert texts(run(tokens, script_minifier=fail)) == [body]

    def test_javascript_type_with_parameters_is_minified(self) -> None:
        tokens = [start("script", ("type", "Text/JavaScript; charset=utf-8")), text("x"), end("script")]
        assert texts(run(tokens, script_minifier=lambda s: "Y")) == ["Y"]

    def test_minifier_error_propagates(self) -> None:
        def boom(stream):
            raise ValueError("bad script")

        tokens = [start("script"), text("x"), end("script")]
        with self.assertRaises(ValueError):
            run(tokens, script_minifier=boom)

    def test_caller_pool_is_used_even_when_idle(self) -> None:
        pool = BufferPool()
        assert len(pool) == 0
        assert Minifier(buffer_pool=pool).buffer_pool is pool

    def test_buffer_returned_after_region(self) -> None:
        pool = BufferPool()
        run([start("script"), text("x"), end("script")], script_minifier=lambda s: s.read(), buffer_pool=pool)
        assert len(pool) == 1

    def test_abandoned_region_emits_nothing_and_releases_buffer(self) -> None:
        pool = BufferPool()
        calls = []

        def fake(stream):
            calls.append(stream.read())
            return ""

        tokens = [start("script"), text("x"), start("b"), text("y"), end("script")]
        gen = minify_tokens(tokens, script_minifier=fake, buffer_pool=pool)
        assert next(gen).name == "script"
        assert next(gen).name == "b"
        assert len(pool) == 0
        gen.close()
        assert len(pool) == 1
        assert calls == []

    def test_unterminated_script_is_not_flushed(self) -> None:
        pool = BufferPool()
        out = run([start("script"), text("x")], script_minifier=lambda s: "Z", buffer_pool=pool)
        assert texts(out) == []
        assert len(pool) == 1


class TestAttributes(unittest.TestCase):
    def test_style_and_class_are_normalized(self) -> None:
        tag = start("div", ("id", "  x  "), ("style", "color:red;; "), ("class", "  a   b  "))
        (out,) = run([tag])
        assert out.attrs == [("id", "  x  "), ("style", "color:red"), ("class", "a b")]

    def test_input_tag_is_not_mutated(self) -> None:
        tag = start("div", ("class", " a  b "))
        (out,) = run([tag])
        assert out is not tag
        assert tag.attrs == [("class", " a  b ")]
        assert out.pos == tag.pos

    def test_other_tags_pass_through_unchanged(self) -> None:
        tag = start("a", ("href", "  x  "), ("title", " t  t "))
        (out,) = run([tag])
        assert out is tag

    def test_bare_class_attribute(self) -> None:
        (out,) = run([start("div", ("class", None), ("hidden", None))])
        assert out.attrs == [("class", None), ("hidden", None)]

    def test_repeated_attributes_keep_order(self) -> None:
        tag = start("div", ("class", " a "), ("data-x", "1"), ("class", " b  c "))
        (out,) = run([tag])
        assert out.attrs == [("class", "a"), ("data-x", "1"), ("class", "b c")]

    def test_self_closing_flag_is_kept(self) -> None:
        (out,) = run([start("img", ("style", "x;"), self_closing=True)])
        assert out.self_closing is True


class TestDebugLogging(unittest.TestCase):
    def test_debug_logs_decisions(self) -> None:
        tokens = [CommentToken(" c "), start("pre"), end("pre"), start("script"), text("x"), end("script")]
        with self.assertLogs("tersehtml.minifier", level="DEBUG") as logs:
            run(tokens, debug=True, script_minifier=lambda s: s.read())
        output = "\n".join(logs.output)
        assert "Dropped comment" in output
        assert "WHITESPACE_PRESERVE" in output
        assert "Minifying script" in output

    def test_no_logging_without_debug(self) -> None:
        with self.assertNoLogs("tersehtml.minifier", level="DEBUG"):
            run([CommentToken(" c "), start("pre"), end("pre")])
