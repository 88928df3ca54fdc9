"""Allow ``python -m swiftsyntax_shims``."""

from swiftsyntax_shims.main import main

if __name__ == "__main__":
    raise SystemExit(main())
