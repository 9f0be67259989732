"""
Shared HTML layout and styling helpers.
"""
import html as html_lib

from fastapi.responses import HTMLResponse

from app.flash import clear_flashes

_FLASH_COLORS = {
    "success": "#22c55e",
    "error": "#f97373",
    "info": "#38bdf8",
}


def render_flashes(flashes) -> str:
    if not flashes:
        return ""
    items = []
    for category, message in flashes:
        color = _FLASH_COLORS.get(category, _FLASH_COLORS["info"])
        items.append(
            f'<div class="flash flash--{html_lib.escape(category)}" style="border-color:{color};">'
            f"{html_lib.escape(message)}</div>"
        )
    return "\n".join(items)


def render_page(title: str, body: str, user: dict | None = None, flashes=None) -> HTMLResponse:
    """
    Shared layout: dark background, nav bar, flash messages and optional 'signed in as' line.
    Rendering flashes also clears the flash cookie.
    """
    if user:
        auth_links = """
          <a href="/account">Account</a>
          <a href="/logout">Logout</a>
        """
        signed_in_text = f'Signed in as <strong>{html_lib.escape(user.get("email") or "")}</strong>'
    else:
        auth_links = """
          <a href="/login">Login</a>
        """
        signed_in_text = "Not signed in"

    html = f"""
    <!DOCTYPE html>
    <html>
      <head>
        <meta charset="utf-8" />
        <title>{html_lib.escape(title)}</title>
        <style>
          :root {{
            color-scheme: dark;
          }}
          * {{
            box-sizing: border-box;
          }}
          body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            margin: 0;
            padding: 0;
            background: #020617;
            color: #e5e7eb;
          }}
          .page {{
            max-width: 960px;
            margin: 0 auto;
            padding: 1.5rem 1rem 3rem;
          }}
          header {{
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 1.5rem;
            padding: 0.75rem 1rem;
            border: 1px solid #1f2937;
            border-radius: 0.75rem;
          }}
          header h1 {{
            font-size: 1.4rem;
            margin: 0;
          }}
          nav {{
            display: flex;
            gap: 0.6rem;
            align-items: center;
          }}
          nav a {{
            text-decoration: none;
            color: #e5e7eb;
            padding: 6px 10px;
            border-radius: 8px;
            background: rgba(255,255,255,0.04);
          }}
          .signed-in {{
            font-size: 0.8rem;
            color: #9ca3af;
            margin-top: 0.25rem;
          }}
          a {{
            color: #38bdf8;
          }}
          .flash {{
            margin-bottom: 1rem;
            padding: 0.75rem 1rem;
            border-left: 4px solid;
            border-radius: 0.5rem;
            background: #0f172a;
          }}
          .card {{
            border-radius: 0.75rem;
            border: 1px solid #1f2937;
            padding: 1rem 1.25rem;
            margin-bottom: 1rem;
          }}
          label {{
            display: block;
            margin-top: 1rem;
            font-size: 0.95rem;
          }}
          input {{
            width: 100%;
            padding: 0.5rem;
            margin-top: 0.25rem;
            border-radius: 0.375rem;
            border: 1px solid #4b5563;
            background: #020617;
            color: #e5e7eb;
          }}
          button {{
            margin-top: 1.5rem;
            padding: 0.75rem 1.5rem;
            border-radius: 0.5rem;
            border: none;
            background: #22c55e;
            color: #022c22;
            font-weight: 600;
            cursor: pointer;
          }}
          .muted {{
            color: #9ca3af;
            font-size: 0.85rem;
          }}
        </style>
      </head>
      <body>
        <div class="page">
          <header>
            <div>
              <h1>{html_lib.escape(title)}</h1>
              <div class="signed-in">{signed_in_text}</div>
            </div>
            <nav>
              <a href="/">Home</a>
              {auth_links}
            </nav>
          </header>
          <main>
            {render_flashes(flashes)}
            {body}
          </main>
        </div>
      </body>
    </html>
    """
    response = HTMLResponse(content=html)
    if flashes:
        clear_flashes(response)
    return response
