"""Pytest bootstrap ensuring the in-repo nfsd_exporter package is imported.

Without this, an older installed nfsd_exporter in site-packages could be
resolved first when running a single test file directly.
"""

import os, sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    # Prepend so it wins over any site-packages installation
    sys.path.insert(0, REPO_ROOT)

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


@pytest.fixture
def proc_root():
    """Proc root whose net/rpc/nfsd matches the documented example snapshot."""
    return os.path.join(DATA_DIR, 'proc')


@pytest.fixture
def modern_proc_root():
    """Proc root captured from a recent kernel (no 'ra' line, short 'fh' line)."""
    return os.path.join(DATA_DIR, 'proc_modern')


@pytest.fixture
def write_nfsd(tmp_path):
    """Write text as <tmp>/net/rpc/nfsd and return the proc root."""
    def _write(text: str) -> str:
        d = tmp_path / 'net' / 'rpc'
        d.mkdir(parents=True, exist_ok=True)
        (d / 'nfsd').write_text(text)
        return str(tmp_path)
    return _write
