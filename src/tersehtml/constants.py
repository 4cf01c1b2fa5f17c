"""HTML Element Constants

This module defines the tag classifications used by the tokenizer and the
minifier. Elements are organized into lists to maintain consistent iteration
order; settings turn them into frozensets for lookups.

Usage:
    from tersehtml.constants import BLOCK_ELEMENTS, RAWTEXT_ELEMENTS

References:
    - https://html.spec.whatwg.org/multipage/rendering.html#the-css-user-agent-style-sheet-and-presentational-hints
"""

# HTML space characters. NBSP is not one of them.
SPACE_CHARACTERS = "\t\n\f\r "

# Whitespace next to the closing tag of one of these is never rendered.
BLOCK_ELEMENTS = [
    "address",
    "article",
    "aside",
    "blockquote",
    "body",
    "caption",
    "center",
    "colgroup",
    "datalist",
    "dd",
    "details",
    "dialog",
    "dir",
    "div",
    "dl",
    "dt",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "frameset",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "head",
    "header",
    "hgroup",
    "hr",
    "html",
    "legend",
    "li",
    "listing",
    "main",
    "menu",
    "nav",
    "noscript",
    "ol",
    "optgroup",
    "option",
    "p",
    "pre",
    "search",
    "section",
    "summary",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "title",
    "tr",
    "ul",
]

# Interior text of these is emitted verbatim.
PRESERVE_INNER_SPACE_ELEMENTS = [
    "listing",
    "plaintext",
    "pre",
    "style",
    "textarea",
    "xmp",
]

# Replaced and inline-block content: a space before one of these does not
# make a following space redundant.
PRESERVE_SURROUNDING_SPACE_ELEMENTS = [
    "audio",
    "button",
    "canvas",
    "embed",
    "iframe",
    "img",
    "input",
    "keygen",
    "math",
    "meter",
    "object",
    "picture",
    "progress",
    "select",
    "svg",
    "textarea",
    "video",
]

# Content of these is tokenized as raw text up to the matching end tag.
RAWTEXT_ELEMENTS = [
    "title",
    "textarea",
    "style",
    "script",
    "xmp",
    "iframe",
    "noembed",
    "noframes",
]

# <script type> values whose body is JavaScript. The empty string covers
# type="" which browsers treat as JavaScript too.
JAVASCRIPT_MIME_TYPES = [
    "",
    "application/ecmascript",
    "application/javascript",
    "application/x-ecmascript",
    "application/x-javascript",
    "module",
    "text/ecmascript",
    "text/javascript",
    "text/javascript1.0",
    "text/javascript1.1",
    "text/javascript1.2",
    "text/javascript1.3",
    "text/javascript1.4",
    "text/javascript1.5",
    "text/jscript",
    "text/livescript",
    "text/x-ecmascript",
    "text/x-javascript",
]
