"""Default script minifier used for <script> bodies."""

import rjsmin


def minify_script(stream):
    """Read JavaScript from a text stream and return it minified."""
    return rjsmin.jsmin(stream.read(), keep_bang_comments=False)
