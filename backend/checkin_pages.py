# checkin_pages.py
from fastapi.responses import HTMLResponse
from jinja2 import DictLoader, Environment, select_autoescape

from checkin_errors import NAV_BACK, NAV_HOME, NAV_NONE

TEMPLATES = {
    "base.html": """
    <!doctype html>
    <html>
      <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <title>Check-in</title>
        <style>
          body { font-family: sans-serif; margin: 2em; text-align: center; }
          .msg { margin: 2em 0; font-size: 1.3em; }
          input, button.form-btn { font-size: 1.2em; padding: 0.5em; margin: 0.5em 0; width: 100%; box-sizing: border-box; }
          form { max-width: 400px; margin: auto; }
          button.go-back { width: auto; display: inline-block; margin: 1em auto 0 auto; font-size: 1em; padding: 0.5em 1.2em; }
        </style>
      </head>
      <body>
        <div class="msg">{% block content %}{% endblock %}</div>
        {% if nav == "back" %}
        <button onclick="window.history.back()" class="go-back">Go Back</button>
        {% elif nav == "home" %}
        <button onclick="window.location.href='/'" class="go-back">Go Home</button>
        {% endif %}
      </body>
    </html>
    """,
    "token_form.html": """
    {% extends "base.html" %}
    {% block content %}
    <h1>Enter Token</h1>
    <form method="post" action="/">
      <input name="token" type="tel" inputmode="numeric" pattern="[0-9]{1,8}" maxlength="8" required placeholder="8-digit token">
      <button type="submit" class="form-btn">Continue</button>
    </form>
    {% endblock %}
    """,
    "student_id_form.html": """
    {% extends "base.html" %}
    {% block content %}
    <h1>Enter Student ID</h1>
    <form method="post" action="/id">
      <input name="student_id" type="tel" inputmode="numeric" pattern="[0-9]{1,20}" maxlength="20" required placeholder="Student ID">
      <input type="hidden" name="token" value="{{ token }}">
      <button type="submit" class="form-btn">Continue</button>
    </form>
    {% endblock %}
    """,
    "confirm_form.html": """
    {% extends "base.html" %}
    {% block content %}
    <h1>Confirm Student ID</h1>
    <form method="post" action="/confirm">
      <input type="hidden" name="student_id" value="{{ student_id }}">
      <input type="hidden" name="token" value="{{ token }}">
      <p>Student ID: <b>{{ student_id }}</b></p>
      <button type="submit" id="confirm-btn" class="form-btn">Confirm</button>
    </form>
    <script>
      document.getElementById('confirm-btn').disabled = true;
      setTimeout(function() {
        document.getElementById('confirm-btn').disabled = false;
      }, {{ confirm_delay_ms }});
    </script>
    {% endblock %}
    """,
    "message.html": """
    {% extends "base.html" %}
    {% block content %}<h2>{{ message }}</h2>{% endblock %}
    """,
}

env = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))


def render_template(name: str, status_code: int = 200, **ctx) -> HTMLResponse:
    tpl = env.get_template(name)
    return HTMLResponse(tpl.render(**ctx), status_code=status_code)


def render_token_form() -> HTMLResponse:
    return render_template("token_form.html", nav=NAV_NONE)


def render_student_id_form(token: str) -> HTMLResponse:
    return render_template("student_id_form.html", nav=NAV_BACK, token=token)


def render_confirm_form(token: str, student_id: str, confirm_delay_sec: int) -> HTMLResponse:
    return render_template(
        "confirm_form.html",
        nav=NAV_BACK,
        token=token,
        student_id=student_id,
        confirm_delay_ms=int(confirm_delay_sec) * 1000,
    )


def render_success() -> HTMLResponse:
    return render_template("message.html", nav=NAV_HOME, message="Sign-in successful!")


def render_message(message: str, nav: str = NAV_HOME, status_code: int = 200) -> HTMLResponse:
    return render_template("message.html", status_code=status_code, nav=nav, message=message)
