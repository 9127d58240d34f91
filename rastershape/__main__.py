"""Allow ``python -m rastershape``."""

from .cli import main

raise SystemExit(main())
