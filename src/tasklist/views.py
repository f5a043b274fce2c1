"""
HTML binding for the task list display.

Turns a DisplaySnapshot into a small self-contained page: the input with an
add button, one list item per row (checkbox, text struck through when
completed, remove button) or the placeholder, and the pending badge. The
inline script only forwards clicks to the row actions and reloads.
"""
from __future__ import annotations

from html import escape
from typing import List

from .rendering import ACTIONS_PREFIX, DisplaySnapshot, TaskRow

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Tasks</title>
<style>
body {{ font-family: sans-serif; max-width: 40rem; margin: 2rem auto; }}
ul {{ list-style: none; padding: 0; }}
li {{ display: flex; justify-content: space-between; padding: .4rem 0; border-bottom: 1px solid #ddd; }}
li.empty {{ justify-content: center; color: #888; }}
.done {{ text-decoration: line-through; }}
.badge {{ background: #476eae; color: #fff; border-radius: 1rem; padding: 0 .6rem; }}
</style>
</head>
<body>
<h1>Tasks <span class="badge" id="pendingTasksCount">{pending}</span></h1>
<form id="taskForm">
<input id="taskInput" name="text" autocomplete="off" placeholder="New task">
<button type="submit">Add</button>
</form>
<ul id="taskList">
{items}
</ul>
<script>
async function send(method, href, body) {{
  const opts = {{method: method, headers: {{"Content-Type": "application/json"}}}};
  if (body !== undefined) opts.body = JSON.stringify(body);
  const res = await fetch(href, opts);
  if (res.ok) window.location.reload();
}}
document.getElementById("taskForm").addEventListener("submit", (e) => {{
  e.preventDefault();
  send("POST", "{add_href}", {{text: document.getElementById("taskInput").value}});
}});
document.querySelectorAll("[data-href]").forEach((el) => {{
  el.addEventListener(el.type === "checkbox" ? "change" : "click",
    () => send(el.dataset.method, el.dataset.href));
}});
</script>
</body>
</html>
"""


def _action_attrs(method: str, href: str) -> str:
    return f'data-method="{escape(method)}" data-href="{escape(href)}"'


# PUBLIC_INTERFACE
def render_row_html(row: TaskRow) -> str:
    checked = " checked" if row.completed else ""
    text_class = ' class="done"' if row.struck_through else ""
    toggle = _action_attrs(row.toggle_action.method, row.toggle_action.href)
    remove = _action_attrs(row.remove_action.method, row.remove_action.href)
    return (
        f'<li data-task-id="{row.id}">'
        f'<span><input type="checkbox"{checked} {toggle}> <span{text_class}>{escape(row.text)}</span></span>'
        f'<button type="button" {remove}>Remove</button>'
        "</li>"
    )


# PUBLIC_INTERFACE
def render_page(snapshot: DisplaySnapshot) -> str:
    """Full HTML page for a display snapshot."""
    items: List[str] = [render_row_html(r) for r in snapshot.rows]
    if not items and snapshot.placeholder is not None:
        items.append(f'<li class="empty">{escape(snapshot.placeholder)}</li>')
    pending = "" if snapshot.pending_count is None else str(snapshot.pending_count)
    return _PAGE.format(items="\n".join(items), pending=pending, add_href=f"{ACTIONS_PREFIX}/")
