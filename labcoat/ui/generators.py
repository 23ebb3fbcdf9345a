"""UI resource generators for host views."""

from mcp_ui_server import create_ui_resource
from mcp_ui_server.core import UIResource

from labcoat.models import HostTab, HostView
from labcoat.ui.templates import get_output_viewer_html


def create_output_ui(host: str, tab: HostTab, view: HostView) -> UIResource:
    """Create an output viewer UI for a host view.

    Args:
        host: Host name
        tab: Which view of the host
        view: The view holding the runner to display

    Returns:
        UIResource with raw HTML content
    """
    runner = view.runner
    intro = f"{runner} @ {runner.destination}" if runner else ""
    output = runner.view() if runner else ""
    state = runner.state_string() if runner else "Not Started"

    html = get_output_viewer_html(host, tab.title, intro, output, state)

    return create_ui_resource({
        "uri": f"ui://labcoat/{host}/{tab.value}",
        "content": {"type": "rawHtml", "htmlString": html},
        "encoding": "text",
    })
