from __future__ import annotations

import os
from pathlib import Path

def main():
    root = Path("demo_backup/source")
    (root / "docs").mkdir(parents=True, exist_ok=True)
    (root / "photos" / "2024").mkdir(parents=True, exist_ok=True)
    (root / "empty").mkdir(parents=True, exist_ok=True)

    (root / "notes.txt").write_text("shopping list\n", encoding="utf-8")
    (root / "docs" / "report.md").write_text("# Report\n", encoding="utf-8")
    # incompressible payloads so the size cap is visible in the output
    (root / "photos" / "2024" / "beach.jpg").write_bytes(os.urandom(300 * 1024))
    (root / "photos" / "2024" / "city.jpg").write_bytes(os.urandom(300 * 1024))

    print(f"Created demo source at: {root.resolve()}")
    print("Try: python -m zipbackup copy demo_backup/source demo_backup/out")
    print("     python -m zipbackup package demo_backup/out --size 409600")

if __name__ == "__main__":
    main()
