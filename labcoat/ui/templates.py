# ruff: noqa: E501
"""HTML templates for UI resources."""

import html
import re

from labcoat.runner import format_output


def minify_html(html_text: str) -> str:
    """Minify HTML by removing unnecessary whitespace between tags.

    Whitespace inside ``<pre>`` blocks is preserved.

    Args:
        html_text: HTML string to minify

    Returns:
        Minified HTML string
    """
    parts = re.split(r"(<pre>.*?</pre>)", html_text, flags=re.DOTALL)
    out = []
    for part in parts:
        if part.startswith("<pre>"):
            out.append(part)
            continue
        part = re.sub(r"<!--.*?-->", "", part, flags=re.DOTALL)
        part = re.sub(r">\s+", ">", part)
        part = re.sub(r"\s+<", "<", part)
        part = re.sub(r"\s+", " ", part)
        out.append(part)
    return "".join(out).strip()


def get_base_styles() -> str:
    """Get base CSS styles for output viewers.

    Returns:
        CSS ``<style>`` block
    """
    return """
    <style>
        body {
            margin: 0;
            background: #0f172a;
            color: #e2e8f0;
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
        }
        .container { padding: 16px; }
        .header {
            display: flex;
            justify-content: space-between;
            align-items: baseline;
            margin-bottom: 12px;
        }
        .title { font-size: 16px; font-weight: 600; }
        .subtitle { font-size: 12px; color: #94a3b8; }
        .badge {
            padding: 2px 8px;
            border-radius: 9999px;
            font-size: 12px;
            font-weight: 600;
        }
        .badge-running { background: #1d4ed8; }
        .badge-done { background: #15803d; }
        .badge-failed { background: #b91c1c; }
        .badge-not-started { background: #475569; }
        .output {
            background: #111827;
            border: 1px solid #374151;
            border-radius: 6px;
            padding: 12px;
            max-height: 75vh;
            overflow-y: auto;
        }
        pre {
            margin: 0;
            font-family: 'Monaco', 'Menlo', 'Consolas', monospace;
            font-size: 13px;
            line-height: 1.5;
            white-space: pre-wrap;
        }
        .label {
            display: inline-block;
            margin: 12px 0 4px;
            padding: 0 8px;
            color: #fefce8;
            background: #5b21b6;
            font-family: 'Monaco', 'Menlo', 'Consolas', monospace;
            font-size: 13px;
        }
    </style>
    """


def get_output_viewer_html(
    host: str, title: str, intro: str, output: str, state: str
) -> str:
    """Generate an output viewer page for one host view.

    Labels in script output are rendered as section headers.

    Args:
        host: Host name
        title: View title, e.g. "Host Status"
        intro: Command line and destination
        output: Raw runner output, labels not yet decoded
        state: Human readable runner state

    Returns:
        Complete HTML page
    """
    # Escaping leaves the label delimiters intact; labels come out pre-escaped.
    body = format_output(
        html.escape(output.replace("\r", "")),
        lambda label: f'</pre><div class="label">{label}</div><pre>',
    )
    badge = "badge-" + state.lower().replace(" ", "-")

    page = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{html.escape(title)}: {html.escape(host)}</title>
        {get_base_styles()}
    </head>
    <body>
        <div class="container">
            <div class="header">
                <div>
                    <div class="title">{html.escape(host)} / {html.escape(title)}</div>
                    <div class="subtitle">{html.escape(intro)}</div>
                </div>
                <span class="badge {badge}">{html.escape(state)}</span>
            </div>
            <div class="output"><pre>{body}</pre></div>
        </div>
    </body>
    </html>
    """

    return minify_html(page)
