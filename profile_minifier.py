#!/usr/bin/env python3
"""Profile the minifier to find performance bottlenecks."""

import cProfile
import io
import pstats

from tersehtml import minify

# Sample HTML
html = """
<!DOCTYPE html>
<html>
<head><title>Test</title><style> p { color: red } </style></head>
<body>
    <!-- layout -->
    <div class="  container   main " style="margin: 0 ;">
        <p>Paragraph   1</p>
        <p>Paragraph 2 with <b>bold</b> and <img src="a.png"> inline</p>
        <table>
            <tr><td>Cell 1</td><td>Cell 2</td></tr>
            <tr><td>Cell 3</td><td>Cell 4</td></tr>
        </table>
        <pre>  keep
   this  </pre>
    </div>
    <script>
        var total = 0 ;
        for ( var i = 0 ; i < 10 ; i++ ) { total += i ; }
    </script>
</body>
</html>
""" * 100  # Repeat for more meaningful results

# Profile
pr = cProfile.Profile()
pr.enable()

for _ in range(10):
    result = minify(html)

pr.disable()

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(50)  # Top 50 functions
print(s.getvalue())
