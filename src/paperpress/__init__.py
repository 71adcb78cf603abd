"""Top-level package for PaperPress.

Provides subpackages:
- paperpress.core – data models, JSON schemas and file helpers
- paperpress.composer – question bank, composition engine and export output
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8")
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.1.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("paperpress")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
