"""Allow ``python -m resgen``."""

from resgen.main import main

raise SystemExit(main())
