#!/usr/bin/env python3
"""
Random fuzzer for the minifier.
Generates malformed HTML and checks that minification never crashes, is
idempotent, and keeps the tag sequence of its input.
"""

import argparse
import random
import string
import sys
import time
import traceback

from tersehtml import Tag, minify, tokenize

TAGS = [
    "div", "span", "p", "a", "b", "img", "table", "tr", "td", "ul", "li",
    "form", "input", "button", "select", "option", "textarea", "script", "style",
    "head", "body", "html", "title", "br", "hr", "h1", "iframe", "object", "video",
    "canvas", "svg", "math", "noscript", "pre", "code", "xmp", "listing", "plaintext",
    "section", "nav", "em", "strong",
]

SCRIPT_TYPES = ["", "text/javascript", "module", "application/json", "text/template", "TEXT/JavaScript; charset=utf-8"]

ATTRIBUTES = ["id", "class", "style", "href", "src", "alt", "title", "type", "disabled", "data-x"]

WHITESPACE = [" ", "\t", "\n", "\r", "\f", "\u00a0", "\v"]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace(max_len=5):
    return "".join(random.choices(WHITESPACE, k=random.randint(0, max_len)))


def fuzz_attribute():
    name = random.choice(ATTRIBUTES)
    value = random_whitespace(3).join([random_string(0, 6) for _ in range(random.randint(0, 3))])
    if name == "style":
        value += random.choice(["", ";", ";;", " ; "])
    quote = random.choice(['"', "'", ""])
    if random.random() < 0.1:
        return name
    if not quote:
        value = value.strip() or "x"
        value = "".join(value.split())
    return f"{name}={quote}{value}{quote}"


def fuzz_open_tag():
    tag = random.choice(TAGS)
    if random.random() < 0.2:
        tag = tag.upper()
    attrs = " ".join(fuzz_attribute() for _ in range(random.randint(0, 3)))
    closing = random.choice([">", "/>", " >", ""])
    return f"<{tag} {attrs}{random_whitespace(2)}{closing}" if attrs else f"<{tag}{closing}"


def fuzz_close_tag():
    tag = random.choice(TAGS)
    return random.choice([f"</{tag}>", f"</{tag} >", f"</{tag.upper()}>", f"</{tag}", "</>"])


def fuzz_comment():
    content = random_whitespace() + random_string(0, 20) + random_whitespace()
    variants = [
        f"<!--{content}-->",
        f"<!--{content}",
        f"<!--{content}--!>",
        "<!---->",
        "<!-->",
        f"<!--[if IE]>{content}<![endif]-->",
        f"<!--[if !IE]><!-->{content}<!--<![endif]-->",
        "<![if !IE]>",
        "<![endif]>",
        f"<?{content}?>",
    ]
    return random.choice(variants)


def fuzz_script():
    script_type = random.choice(SCRIPT_TYPES)
    attr = f' type="{script_type}"' if script_type else ""
    body = random.choice([
        "var x = 1 ;",
        "function f ( a ) { return a + 1 ; }",
        "/* block */ var a = 'b' ; // line",
        "if (a < b) { x = '</p>' }",
        random_string(0, 30),
        "",
    ])
    end = random.choice(["</script>", "</SCRIPT>", ""])
    return f"<script{attr}>{random_whitespace()}{body}{random_whitespace()}{end}"


def fuzz_preserved():
    tag = random.choice(["pre", "textarea", "style", "xmp", "listing"])
    body = random_whitespace() + random_string(0, 10) + random_whitespace() + random_string(0, 10)
    return f"<{tag}>{body}</{tag}>"


def fuzz_text():
    strategies = [
        lambda: random_string(1, 30),
        lambda: random_whitespace(10),
        lambda: random_whitespace() + random_string(1, 10) + random_whitespace(),
        lambda: "&amp; " + random_string(1, 5),
        lambda: "a < b",
        lambda: "<" + random_string(1, 5),
        lambda: "\r\n" * random.randint(1, 5),
    ]
    return random.choice(strategies)()


def fuzz_nested_structure(depth=0, max_depth=6):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    children = [fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3))]
    sep = random_whitespace(2)
    return f"<{tag}>{sep}{sep.join(children)}{sep}</{tag}>"


def fuzz_doctype():
    return random.choice(["<!DOCTYPE html>", "<!doctype html>", "<!DOCTYPE>", "<!DOCTYPE html PUBLIC \"\" \"\">"])


def generate_fuzzed_html():
    """Generate a complete fuzzed HTML document."""
    parts = []
    if random.random() < 0.5:
        parts.append(fuzz_doctype())

    for _ in range(random.randint(1, 20)):
        element_type = random.choices(
            [
                fuzz_open_tag,
                fuzz_close_tag,
                fuzz_comment,
                fuzz_text,
                fuzz_script,
                fuzz_preserved,
                fuzz_nested_structure,
            ],
            weights=[20, 15, 8, 20, 5, 5, 10],
        )[0]
        parts.append(element_type())
        if random.random() < 0.5:
            parts.append(random_whitespace())

    return "".join(parts)


def tag_sequence(html):
    return [(t.kind, t.name) for t in tokenize(html) if isinstance(t, Tag)]


def keep_script(stream):
    return stream.read()


def check(html):
    """Return a failure description, or None when `html` minifies cleanly."""
    minify(html)
    # Script bodies pass through unchanged on the idempotence runs.
    once = minify(html, script_minifier=keep_script)
    twice = minify(once, script_minifier=keep_script)
    if twice != once:
        return "not idempotent"
    if tag_sequence(once) != tag_sequence(html):
        return "tag sequence changed"
    return None


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against the minifier."""
    if seed is not None:
        random.seed(seed)

    failures = []
    hangs = []
    successes = 0

    print(f"Fuzzing minifier with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            problem = check(html)
            elapsed = time.perf_counter() - start
        except Exception as e:
            failures.append({"test_num": i, "html": html, "error": str(e), "traceback": traceback.format_exc()})
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        if problem is not None:
            failures.append({"test_num": i, "html": html, "error": problem, "traceback": ""})
            if verbose:
                print(f"  FAIL: Test {i}: {problem}")
        elif elapsed > 5.0:
            hangs.append({"test_num": i, "html": html, "time": elapsed})
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")
        else:
            successes += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Failures:       {len(failures)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if failures:
        print(f"\n{'='*60}")
        print("FAILURE DETAILS:")
        print(f"{'='*60}")
        for failure in failures[:10]:
            print(f"\nTest #{failure['test_num']}:")
            print(f"  HTML: {failure['html'][:200]!r}...")
            print(f"  Error: {failure['error']}")
        if len(failures) > 10:
            print(f"\n... and {len(failures) - 10} more failures")

    if save_failures and (failures or hangs):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']}\n")
                f.write(f"Error: {failure['error']}\n")
                f.write(f"{failure['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the minifier with malformed input")
    parser.add_argument("--num-tests", "-n", type=int, default=1000, help="Number of test cases (default: 1000)")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--save-failures", action="store_true", help="Save failures to a file")
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed HTML documents and their minified form",
    )
    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            html = generate_fuzzed_html()
            print(f"=== Sample {i+1} ===")
            print(html)
            print("--- minified ---")
            print(minify(html))
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, save_failures=args.save_failures)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
