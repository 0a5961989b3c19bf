import sys

from task_sync.main import main

sys.exit(main())
