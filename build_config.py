"""Options read by the asset build (``flask assets build <profile>``)."""
import copy
import os

PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))

OPTIONS = {
    'project_dir': PROJECT_DIR,
    'library': {
        'path': 'assets/',
    },
    'views': {
        'path': 'views/',
        'view_file_ext': '.html',
    },
    'public_dir': 'static/',
}

PROFILES = {
    'dev': {
        'mode': 'dev',
    },
    'prod': {
        'mode': 'prod',
    },
}


def _merge(base, overrides):
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def profile_options(name):
    """Return the shared options with the ``name`` profile applied on top."""
    if name not in PROFILES:
        raise KeyError(f"unknown build profile {name!r} (expected one of: {', '.join(PROFILES)})")
    return _merge(copy.deepcopy(OPTIONS), PROFILES[name])
