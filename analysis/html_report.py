"""
HTML report generation utilities.
"""

import html
from datetime import datetime
from pathlib import Path
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd

_CSS = """
:root {
  --bg: #f5f7fa; --card: #ffffff; --muted: #e8ecf1;
  --text: #1a202c; --text-2: #4a5568; --accent: #667eea; --warn: #ed8936;
}
* { box-sizing: border-box; }
body { font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif;
       background: var(--bg); color: var(--text); line-height: 1.5; margin: 0; padding: 24px; }
.container { max-width: 1200px; margin: 0 auto; }
h1 { font-size: 28px; margin: 0 0 12px; }
h2 { font-size: 22px; color: var(--accent); border-bottom: 2px solid var(--accent);
     padding-bottom: 6px; margin: 24px 0 12px; }
h3 { font-size: 17px; margin: 18px 0 8px; }
p { color: var(--text-2); margin: 8px 0; }
code { background: var(--muted); padding: 1px 4px; border-radius: 4px; }
.card { background: var(--card); border-radius: 10px; padding: 16px 20px; margin: 16px 0;
        box-shadow: 0 1px 3px rgba(0,0,0,0.12); }
.badge { display: inline-block; padding: 4px 12px; border-radius: 14px; background: var(--accent);
         color: white; font-size: 12px; font-weight: 600; margin-right: 6px; }
.badge.warning { background: var(--warn); }
.tabbar { display: flex; flex-wrap: wrap; gap: 6px; margin: 16px 0; }
.tabbtn { background: var(--muted); border: none; padding: 8px 14px; border-radius: 8px; cursor: pointer; }
.tabbtn.active { background: var(--accent); color: white; }
.tabcontent { display: none; }
.tabcontent.active { display: block; }
table.tbl { border-collapse: collapse; font-size: 13px; margin: 8px 0; width: 100%; }
table.tbl th, table.tbl td { border-bottom: 1px solid var(--muted); padding: 4px 8px; text-align: left; }
table.tbl th { background: var(--muted); }
img.figure { max-width: 100%; margin: 8px 0; }
.small { font-size: 13px; color: var(--text-2); }
.footer { text-align: center; font-size: 12px; color: var(--text-2); margin: 32px 0 8px; }
"""

_TAB_SCRIPT = """
<script>
function openTab(tabId) {
  document.querySelectorAll('.tabcontent').forEach(t => t.classList.remove('active'));
  document.querySelectorAll('.tabbtn').forEach(b => b.classList.remove('active'));
  const t = document.getElementById(tabId);
  if (t) t.classList.add('active');
  const b = document.querySelector(`.tabbtn[data-tab="${tabId}"]`);
  if (b) b.classList.add('active');
}
document.addEventListener('click', (e) => {
  const btn = e.target.closest('.tabbtn');
  if (btn) openTab(btn.getAttribute('data-tab'));
});
document.addEventListener('DOMContentLoaded', () => openTab("%s"));
</script>
"""


def _safe_slug(text: str) -> str:
    """Convert text to URL-safe slug."""
    slug = "".join(ch.lower() if ch.isalnum() else "-" for ch in text).strip("-")
    while "--" in slug:
        slug = slug.replace("--", "-")
    return slug or "item"


# Columns shown with more than two decimals
_COLUMN_DECIMALS = {"r_hat": 3}


def _df_to_html_table(df: pd.DataFrame) -> str:
    """Convert DataFrame to HTML table with proper formatting."""
    def make_formatter(decimals: int):
        def format_value(x):
            if isinstance(x, (bool, np.bool_)):
                return "yes" if x else "no"
            if isinstance(x, (float, np.floating)):
                if np.isinf(x):
                    return "∞" if x > 0 else "-∞"
                if np.isnan(x):
                    return ""
                return f"{x:.{decimals}f}"
            return str(x)
        return format_value

    return df.to_html(
        index=False,
        escape=True,
        classes="tbl",
        border=0,
        formatters={col: make_formatter(_COLUMN_DECIMALS.get(col, 2)) for col in df.columns},
    )


class HtmlReport:
    """Streaming HTML report builder: write as you go, close at the end."""

    def __init__(self, report_path: Path, title: str):
        self.report_path = Path(report_path)
        self.report_path.parent.mkdir(parents=True, exist_ok=True)
        self._f = open(self.report_path, "w", encoding="utf-8")
        self._f.write(
            f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{html.escape(title)}</title>
<style>{_CSS}</style>
</head>
<body>
<div class="container">
<h1>{html.escape(title)}</h1>
"""
        )

    def add_html(self, raw: str) -> None:
        self._f.write(raw + "\n")

    def add_paragraph(self, text: str) -> None:
        self._f.write(f"<p>{text}</p>\n")

    def add_h2(self, text: str) -> None:
        self._f.write(f"<h2>{text}</h2>\n")

    def add_h3(self, text: str) -> None:
        self._f.write(f"<h3>{text}</h3>\n")

    def add_card_start(self) -> None:
        self._f.write('<div class="card">\n')

    def add_card_end(self) -> None:
        self._f.write("</div>\n")

    def add_image(self, rel_path: str, alt: str) -> None:
        self._f.write(f'<img class="figure" src="{rel_path}" alt="{html.escape(alt)}">\n')

    def start_tabs(self, tabs: Sequence[Tuple[str, str]], default_tab_id: str) -> None:
        """Write the tab bar and the script that switches tabs."""
        btns = [
            f'<button class="tabbtn" data-tab="{tab_id}">{html.escape(label)}</button>'
            for tab_id, label in tabs
        ]
        self._f.write('<div class="tabbar">\n' + "\n".join(btns) + "\n</div>\n")
        self._f.write(_TAB_SCRIPT % default_tab_id)

    def open_tab_content(self, tab_id: str) -> None:
        self._f.write(f'<div class="tabcontent" id="{tab_id}">\n')

    def close_tab_content(self) -> None:
        self._f.write("</div>\n")

    def add_footnote(self, title: str, html_body: str) -> None:
        """Add an expandable footnote."""
        self._f.write(
            f'<details class="small"><summary>{title}</summary>{html_body}</details>\n'
        )

    def close(self) -> None:
        self._f.write(
            f"""<div class="footer">
Generated on {datetime.now().strftime("%B %d, %Y at %H:%M:%S")} with PyMC
</div>
</div>
</body>
</html>
"""
        )
        self._f.close()


def add_table_with_column_guide(
    report: HtmlReport,
    df: pd.DataFrame,
    col_guide: Dict[str, str],
    title: str = "Column guide",
) -> None:
    """
    Add a table followed by a description of its columns.

    Parameters
    ----------
    report : HtmlReport
        Report instance to add to
    df : pd.DataFrame
        Data to display
    col_guide : Dict[str, str]
        Column name -> description mapping
    title : str
        Title for the column guide section
    """
    report.add_html(_df_to_html_table(df))

    items = [
        f"<li><b>{html.escape(col)}</b>: {desc}</li>"
        for col, desc in col_guide.items()
        if col in df.columns
    ]
    if not items:
        return

    report.add_footnote(title, f"<ul>{''.join(items)}</ul>")
