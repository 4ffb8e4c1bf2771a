"""Build a small release plan in memory and print its schedule."""

from datetime import date

from datechain import ProjectPlanner
from datechain.formatting import render_table
from datechain.logger import setup_logger
from datechain.storage import MemoryStore


def main() -> None:
    setup_logger(1)
    planner = ProjectPlanner(date(2024, 1, 1), name="Release 2.0", store=MemoryStore())

    planner.add_activity("Design", 3)
    planner.add_activity("Build", 5, dependencies="1")
    planner.add_activity("Write docs", 2, dependencies="1")
    planner.add_activity("Release review", 1, dependencies="2, 3", allowed_days="Thu")

    # Stretch the build; review moves with it
    planner.set_duration(1, 7)
    planner.save()

    print(planner.name)
    print(render_table(planner.activities))


if __name__ == "__main__":
    main()
