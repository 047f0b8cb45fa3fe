"""
Asset library wiring for Flask-Assets.

A library is a directory of packages, one sub-directory each, holding .js and
.css files and an optional bundle.json::

    {"dependencies": ["other-package"]}

Templates pull packages in with a comment line::

    {# requires: base site #}

Every template that requires packages gets one Flask-Assets bundle per kind,
named ``<view>.js`` / ``<view>.css``, with dependencies first. In dev mode
(``ASSETS_DEBUG``) the bundle renders one tag per library file, served from
the library blueprint; in prod mode it is merged into a hash-versioned file
under the public directory. ``flask assets build`` prebuilds the prod files.
"""
import json
import logging
import os
import re
from dataclasses import dataclass, field

from flask import Blueprint, before_render_template
from flask_assets import Bundle, Environment

logger = logging.getLogger(__name__)

BLUEPRINT = 'library'
LIBRARY_URL = '/library'
OUTPUT_DIR = 'library-assets'
BUNDLE_FILE = 'bundle.json'
KINDS = ('js', 'css')

REQUIRES_RE = re.compile(r'\{#\s*requires:(?P<names>[^#]*)#\}')


class BundlerError(Exception):
    pass


class UnknownPackage(BundlerError):
    def __init__(self, name, required_by=None):
        self.name = name
        self.required_by = required_by
        where = f' (required by {required_by})' if required_by else ''
        super().__init__(f'unknown asset package {name!r}{where}')


class DependencyCycle(BundlerError):
    def __init__(self, chain):
        self.chain = chain
        super().__init__('asset package dependency cycle: ' + ' -> '.join(chain))


class BadBundleFile(BundlerError):
    pass


@dataclass
class Package:
    name: str
    path: str
    dependencies: list = field(default_factory=list)
    files: dict = field(default_factory=dict)

    def sources(self, kind):
        """Bundle items for ``kind``, addressed through the library blueprint."""
        return [f'{BLUEPRINT}/{self.name}/{filename}' for filename in self.files[kind]]


def _read_bundle_file(path):
    try:
        with open(path, encoding='utf-8') as fp:
            data = json.load(fp)
    except ValueError as exc:
        raise BadBundleFile(f'{path}: {exc}') from exc
    if not isinstance(data, dict):
        raise BadBundleFile(f'{path}: expected a JSON object')
    dependencies = data.get('dependencies', [])
    if not isinstance(dependencies, list) or not all(isinstance(d, str) for d in dependencies):
        raise BadBundleFile(f'{path}: "dependencies" must be a list of package names')
    return dependencies


class Library:
    """The packages found under one library directory."""

    def __init__(self, path):
        self.path = path
        self.packages = {}
        if not os.path.isdir(path):
            logger.warning('asset library %s does not exist', path)
            return
        for name in sorted(os.listdir(path)):
            package_path = os.path.join(path, name)
            if os.path.isdir(package_path):
                self.packages[name] = self._load_package(name, package_path)

    @staticmethod
    def _load_package(name, package_path):
        dependencies = []
        bundle_file = os.path.join(package_path, BUNDLE_FILE)
        if os.path.isfile(bundle_file):
            dependencies = _read_bundle_file(bundle_file)
        entries = sorted(os.listdir(package_path))
        files = {
            kind: [e for e in entries if e.endswith('.' + kind) and os.path.isfile(os.path.join(package_path, e))]
            for kind in KINDS
        }
        return Package(name, package_path, dependencies, files)

    def package(self, name, required_by=None):
        try:
            return self.packages[name]
        except KeyError:
            raise UnknownPackage(name, required_by) from None

    def resolve(self, names):
        """Return the packages for ``names`` with dependencies first, each once."""
        ordered = []
        done = set()

        def visit(name, chain, required_by):
            if name in done:
                return
            if name in chain:
                raise DependencyCycle(chain[chain.index(name):] + [name])
            package = self.package(name, required_by)
            for dependency in package.dependencies:
                visit(dependency, chain + [name], name)
            done.add(name)
            ordered.append(package)

        for name in names:
            visit(name, [], None)
        return ordered


def parse_requires(text):
    names = []
    for match in REQUIRES_RE.finditer(text):
        for name in match.group('names').split():
            if name not in names:
                names.append(name)
    return names


def find_views(views_dir, view_ext):
    """Yield ``(view name, required packages)`` for templates that require any.

    Layouts and partials declare nothing and are skipped.
    """
    for root, dirs, files in os.walk(views_dir):
        dirs.sort()
        for filename in sorted(files):
            if not filename.endswith(view_ext):
                continue
            path = os.path.join(root, filename)
            with open(path, encoding='utf-8') as fp:
                requires = parse_requires(fp.read())
            if requires:
                rel = os.path.relpath(path, views_dir)[:-len(view_ext)]
                yield rel.replace(os.sep, '/'), requires


class AssetHook:
    """Registers view bundles with Flask-Assets and names them in each template's context.

    Templates render the names with the ``{% assets %}`` tag::

        {% if asset_js %}{% assets asset_js %}<script src="{{ ASSET_URL }}"></script>{% endassets %}{% endif %}
    """

    def __init__(self, app=None, config=None):
        self.env = None
        self.bundles = {}
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config):
        app.config.setdefault('ASSETS_DEBUG', config.mode == 'dev')
        app.config.setdefault('ASSETS_AUTO_BUILD', True)
        app.config.setdefault('ASSETS_CACHE', False)
        app.config.setdefault('ASSETS_VERSIONS', 'hash')
        app.config.setdefault('ASSETS_MANIFEST', f'json:{OUTPUT_DIR}/manifest.json')

        app.register_blueprint(Blueprint(
            BLUEPRINT, __name__,
            static_folder=config.library_dir,
            static_url_path=LIBRARY_URL,
        ))
        self.env = Environment(app)

        library = Library(config.library_dir)
        for view, requires in find_views(config.views_dir, config.view_ext):
            packages = library.resolve(requires)
            for kind in KINDS:
                sources = [item for package in packages for item in package.sources(kind)]
                if not sources:
                    continue
                name = f'{view}.{kind}'
                bundle = Bundle(*sources, output=f'{OUTPUT_DIR}/{view}.%(version)s.{kind}')
                self.env.register(name, bundle)
                self.bundles[name] = bundle
            logger.debug('%s: %s', view, ', '.join(p.name for p in packages))
        logger.info('registered %d asset bundle(s) in %s mode', len(self.bundles), config.mode)

        app.extensions['asset_hook'] = self
        before_render_template.connect(self._inject, app)

    def bundle_name(self, view, kind):
        name = f'{view}.{kind}'
        return name if name in self.bundles else None

    def _inject(self, sender, template, context, **extra):
        view = os.path.splitext(template.name or '')[0]
        for kind in KINDS:
            context.setdefault(f'asset_{kind}', self.bundle_name(view, kind))
