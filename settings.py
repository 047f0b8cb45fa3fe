"""
Server configuration.

The port and directory layout are fixed. A local .env file may set
LOG_LEVEL and ASSET_PROFILE (dev or prod).
"""
import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from build_config import profile_options

load_dotenv(find_dotenv(usecwd=True))

PORT = 7000


@dataclass(frozen=True)
class ServerConfig:
    project_dir: str
    views_dir: str
    view_ext: str
    public_dir: str
    library_dir: str
    mode: str = 'dev'
    port: int = PORT
    home_template: str = 'home/home'

    @classmethod
    def from_options(cls, options, **overrides):
        """Build a config sharing its paths with the asset build options."""
        project_dir = options['project_dir']

        def path(rel):
            return os.path.normpath(os.path.join(project_dir, rel))

        return cls(
            project_dir=project_dir,
            views_dir=path(options['views']['path']),
            view_ext=options['views']['view_file_ext'],
            public_dir=path(options['public_dir']),
            library_dir=path(options['library']['path']),
            mode=options.get('mode', 'dev'),
            **overrides,
        )

    def template_name(self, view):
        return view + self.view_ext


def load_config(profile=None):
    profile = profile or os.getenv('ASSET_PROFILE', 'dev')
    return ServerConfig.from_options(profile_options(profile))


def configure_logging():
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
