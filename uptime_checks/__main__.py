from uptime_checks.main import main

raise SystemExit(main())
