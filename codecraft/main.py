"""
CodeCraft mentor entry point.
"""
from __future__ import annotations

from codecraft.app import MentorApplication


def main() -> int:
    app = MentorApplication()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
