"""Score renderers turning a ScoreLayout into a displayable document."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .layout import ScoreLayout

logger = logging.getLogger(__name__)

VEXFLOW_URL = "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/cjs/vexflow.js"


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class ScoreRenderer(ABC):
    """Abstract score renderer."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """MIME type of the rendered output."""

    @abstractmethod
    def render(self, layout: ScoreLayout, *, title: str = "") -> str:
        """Render a layout into a document string."""


class VexflowHtmlRenderer(ScoreRenderer):
    """Self-contained HTML page drawing the layout with VexFlow's EasyScore.

    The first stave carries the clef and time signature; every further
    measure gets its own stave in the same system.
    """

    def __init__(self, vexflow_url: str = VEXFLOW_URL):
        self.vexflow_url = vexflow_url

    @property
    def media_type(self) -> str:
        return "text/html"

    def render(self, layout: ScoreLayout, *, title: str = "") -> str:
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        payload = {
            "tokens": list(layout.tokens),
            "clef": layout.clef,
            "time_signature": layout.time_signature,
            "width": layout.canvas.width,
            "height": layout.canvas.height,
        }
        score_json = json.dumps(payload, separators=(",", ":")).replace("</", "<\\/")

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{title_safe}</title>
  <script src="{self.vexflow_url}"></script>
  <style>
    body {{ font-family: Georgia, serif; margin: 2rem; }}
    h1 {{ font-size: 1.4rem; color: #222; }}
    #score {{ min-width: {layout.canvas.width}px; min-height: {layout.canvas.height}px; }}
  </style>
</head>
<body>
{heading}  <div id="score"></div>
  <script id="score-data" type="application/json">{score_json}</script>
  <script>
    const payload = JSON.parse(document.getElementById("score-data").textContent);
    const vf = new Vex.Flow.Factory({{
      renderer: {{ elementId: "score", width: payload.width, height: payload.height }},
    }});
    const score = vf.EasyScore();
    const system = vf.System();
    payload.tokens.forEach((token, index) => {{
      const stave = system.addStave({{ voices: [score.voice(score.notes(token))] }});
      if (index === 0) {{
        stave.addClef(payload.clef).addTimeSignature(payload.time_signature);
      }}
    }});
    vf.draw();
  </script>
</body>
</html>"""


def render_score(
    layout: ScoreLayout,
    renderer: Optional[ScoreRenderer],
    title: str = "",
) -> Optional[str]:
    """Render with ``renderer``; no renderer means nothing to draw."""
    if renderer is None:
        logger.debug("No score renderer, skipping %d measures", layout.measure_count)
        return None
    return renderer.render(layout, title=title)


__all__ = ["VEXFLOW_URL", "ScoreRenderer", "VexflowHtmlRenderer", "render_score"]
