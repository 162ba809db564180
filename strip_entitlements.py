#!/usr/bin/env python3
"""
Source-checkout entrypoint.

Allows running the tool without installing it:
  python3 strip_entitlements.py strip MyApp.app -o entitlements.xml
"""

import os
import sys

# Support running from a source checkout without installation by adding `src/`
# to sys.path.
_HERE = os.path.dirname(os.path.abspath(__file__))
_SRC = os.path.join(_HERE, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

# Make this module behave like a package shim when imported as
# `strip_entitlements`, so it does not shadow `src/strip_entitlements/`.
__path__ = [os.path.join(_SRC, "strip_entitlements")]


def main(argv: list[str] | None = None) -> int:
    from strip_entitlements.cli import main as _main

    return _main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
