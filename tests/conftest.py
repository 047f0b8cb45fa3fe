import pytest

from app import create_app
from build_config import profile_options
from settings import ServerConfig

LAYOUT = """<html><head>
{% if asset_css %}{% assets asset_css %}<link rel="stylesheet" href="{{ ASSET_URL }}">
{% endassets %}{% endif %}
</head>
<body>{% block content %}{% endblock %}
{% if asset_js %}{% assets asset_js %}<script src="{{ ASSET_URL }}"></script>
{% endassets %}{% endif %}
</body></html>
"""

HOME = """{# requires: home #}
{% extends "layout.html" %}
{% block content %}<h1>Home</h1>{% endblock %}
"""

ABOUT = """{% extends "layout.html" %}
{% block content %}<h1>About</h1>{% endblock %}
"""

PNG = b"\x89PNG\r\n\x1a\n\x00\x01"


@pytest.fixture
def project(tmp_path):
    """A throwaway project tree: views, asset library and public dir."""
    views = tmp_path / "views"
    (views / "home").mkdir(parents=True)
    (views / "layout.html").write_text(LAYOUT)
    (views / "about.html").write_text(ABOUT)
    (views / "home" / "home.html").write_text(HOME)

    assets = tmp_path / "assets"
    (assets / "base").mkdir(parents=True)
    (assets / "base" / "base.js").write_text("var base = 1;\n")
    (assets / "base" / "base.css").write_text("body { color: red; }\n")

    (assets / "site").mkdir()
    (assets / "site" / "bundle.json").write_text('{"dependencies": ["base"]}')
    (assets / "site" / "site.js").write_text("var site = base + 1;\n")

    (assets / "home").mkdir()
    (assets / "home" / "bundle.json").write_text('{"dependencies": ["site"]}')
    (assets / "home" / "home.css").write_text(".home { margin: 0; }\n")

    static = tmp_path / "static"
    (static / "img").mkdir(parents=True)
    (static / "robots.txt").write_text("User-agent: *\n")
    (static / "img" / "logo.png").write_bytes(PNG)
    return tmp_path


@pytest.fixture
def make_config(project):
    def make(profile="dev"):
        options = profile_options(profile)
        options["project_dir"] = str(project)
        return ServerConfig.from_options(options)

    return make


@pytest.fixture
def make_app(make_config):
    def make(profile="dev"):
        return create_app(make_config(profile))

    return make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()
