from unit_watcher.main import main

raise SystemExit(main())
