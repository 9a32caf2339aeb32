"""Source-checkout entry for `docbuild`.

Adds `src/docbuild` to this package's search path, so `import docbuild.page` and the other
subpackages load from a plain checkout, without `pip install -e .`.
"""

from __future__ import annotations

from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
_SRC_PACKAGE = _ROOT / "src" / "docbuild"

if _SRC_PACKAGE.is_dir():
    __path__.append(str(_SRC_PACKAGE))
