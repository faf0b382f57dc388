"""HTML pages served on the read and default paths.

Every value taken from a session record is HTML-escaped before it is
placed in the page.
"""

from __future__ import annotations

from html import escape
from string import Template
from typing import Any, Mapping

_STYLE = """
    body { font-family: Arial, sans-serif; background-color: #f4f4f4; color: #333; }
    .container { max-width: 600px; margin: 50px auto; padding: 20px; background: #fff; border-radius: 8px; box-shadow: 0 0 10px rgba(0, 0, 0, 0.1); }
    h1 { color: #0070f3; }
    .info { margin-bottom: 20px; }
    .info h2 { margin: 0; }
    .info p { margin: 5px 0; }
    .footer { text-align: center; margin-top: 20px; color: #666; font-size: 12px; }
"""

_ANALYTICS_HEAD = Template("""
  <script>
  (function(w,d,s,l,i){w[l]=w[l]||[];w[l].push({'gtm.start':
  new Date().getTime(),event:'gtm.js'});var f=d.getElementsByTagName(s)[0],
  j=d.createElement(s),dl=l!='dataLayer'?'&l='+l:'';j.async=true;j.src=
  'https://www.googletagmanager.com/gtm.js?id='+i+dl;f.parentNode.insertBefore(j,f);
  })(window,document,'script','dataLayer','$tag_id');
  </script>""")

_ANALYTICS_BODY = Template("""
  <noscript><iframe src="https://www.googletagmanager.com/ns.html?id=$tag_id"
  height="0" width="0" style="display:none;visibility:hidden"></iframe></noscript>""")

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
  <title>Meeting Information</title>
  <style>$style</style>$analytics_head
</head>
<body>$analytics_body
  <div class="container">
$content
    <div class="footer">Powered by $brand</div>
  </div>
</body>
</html>""")

_SESSION_CONTENT = Template("""    <h1>Meeting Information</h1>
    <div class="info">
      <h2>Topic: $topic</h2>
      <p>Start Time: $start_time</p>
      <p>Duration: $duration minutes</p>
      <p>Join URL: <a href="$join_url">$join_url</a></p>
    </div>""")

_GENERIC_CONTENT = """    <h1>Welcome to Meeting Information</h1>
    <p>Please provide a valid group ID and token to see specific call details.</p>"""


def _field(record: Mapping[str, Any], name: str) -> str:
    value = record.get(name)
    return "" if value is None else escape(str(value))


class PageRenderer:
    """Renders the session detail page and the generic landing page."""

    def __init__(self, *, analytics_tag_id: str | None = None, brand_name: str = "Your Brand") -> None:
        self._analytics_tag_id = analytics_tag_id
        self._brand_name = brand_name

    def _page(self, content: str) -> str:
        head = body = ""
        if self._analytics_tag_id:
            tag_id = escape(self._analytics_tag_id)
            head = _ANALYTICS_HEAD.substitute(tag_id=tag_id)
            body = _ANALYTICS_BODY.substitute(tag_id=tag_id)
        return _PAGE.substitute(
            style=_STYLE,
            analytics_head=head,
            analytics_body=body,
            content=content,
            brand=escape(self._brand_name),
        )

    def render_session(self, record: Mapping[str, Any]) -> str:
        content = _SESSION_CONTENT.substitute(
            topic=_field(record, "topic"),
            start_time=_field(record, "start_time"),
            duration=_field(record, "duration"),
            join_url=_field(record, "join_url"),
        )
        return self._page(content)

    def render_generic(self) -> str:
        return self._page(_GENERIC_CONTENT)
