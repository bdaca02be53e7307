"""Fetch a remote CSV of earthquake inter-event times, validate it, keep a local copy.

Usage (from project root):
    python scripts/download_gap_data.py URL [column]

What it does:
    1. Reads the CSV straight from the URL with GapDataLoader (pandas)
    2. Rejects it if any gap is missing, zero or negative
    3. Writes the validated gaps to data/<file name from URL> as a
       single 'gap' column

After running, fit the local copy with:
    from quake_weibull import run_analysis
    result = run_analysis('<file name>.csv', column='gap', data_dir='data')

or run the end-to-end check:
    QUAKE_GAPS_CSV=data/<file name>.csv pytest -m slow tests/test_workflow.py
"""

import sys
from pathlib import Path
from urllib.parse import urlparse

import pandas as pd

from quake_weibull import GapDataLoader

OUT_DIR = Path(__file__).parent.parent / "data"


def fetch_gaps(url: str, column: str = None, dest: Path = None) -> Path:
    """Load gaps from ``url`` and save them under ``dest`` (data/<name> by default)."""
    if dest is None:
        dest = OUT_DIR / (Path(urlparse(url).path).name or "gaps.csv")
    if dest.exists():
        print(f"[SKIP] File already exists: {dest}")
        return dest

    data = GapDataLoader(OUT_DIR).load_csv(url, column=column)

    dest.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame({'gap': data.x}).to_csv(dest, index=False)
    print(f"[OK] Saved {data.n} gaps to {dest}")
    return dest


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    url = sys.argv[1]
    column = sys.argv[2] if len(sys.argv) > 2 else None
    dest = fetch_gaps(url, column)

    print("\nTo fit the model:")
    print("  from quake_weibull import run_analysis")
    print(f"  result = run_analysis('{dest.name}', column='gap', data_dir='data')")


if __name__ == "__main__":
    main()
