from maze_race.app import main

raise SystemExit(main())
