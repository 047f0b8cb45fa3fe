import os

from flask import Flask, render_template

from bundler import AssetHook
from settings import configure_logging, load_config


def create_app(config=None):
    config = config or load_config()
    if not os.path.isdir(config.views_dir):
        raise FileNotFoundError(f'views directory {config.views_dir} does not exist')
    if not os.access(config.views_dir, os.R_OK | os.X_OK):
        raise PermissionError(f'views directory {config.views_dir} is not readable')
    # Public files are served from the URL root; registered before any route
    app = Flask(
        __name__,
        root_path=config.project_dir,
        template_folder=config.views_dir,
        static_folder=config.public_dir,
        static_url_path='',
    )
    app.config['SERVER_CONFIG'] = config
    AssetHook(app, config)

    @app.get('/')
    def home():
        return render_template(config.template_name(config.home_template))

    return app


app = create_app()


if __name__ == '__main__':
    configure_logging()
    # Runs on http://127.0.0.1:7000
    app.run(port=app.config['SERVER_CONFIG'].port)
