from codecraft.main import main

raise SystemExit(main())
