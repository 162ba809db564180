"""
`python -m strip_entitlements` entrypoint.

The installed console script `strip-entitlements` calls the same
`strip_entitlements.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
