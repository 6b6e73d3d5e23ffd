from commit_rush.cli import main

raise SystemExit(main())
