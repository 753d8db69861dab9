from configbook.cli import main

raise SystemExit(main())
