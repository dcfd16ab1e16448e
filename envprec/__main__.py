from .precedence_cli import main

raise SystemExit(main())
