"""
Smoke Test Script for the translines pipeline.

Usage
-----
1. Offline run with a fake, randomly slow translator (no API key needed):
    $ python scripts/smoke.py

2. Live run against Google Translate (needs GOOGLE_API_KEY in env or .env):
    $ python scripts/smoke.py --live

3. Live run over a file:
    $ python scripts/smoke.py --live --file samples/lines.txt
"""

import argparse
import logging
import random
import sys
import time
import traceback
from pathlib import Path

from dotenv import load_dotenv

from translines.core.errors import MissingCredentialError
from translines.core.result import Result, ok
from translines.core.settings import PipelineConfig
from translines.pipelines.ordered_translation import run_pipeline
from translines.translate.base import Translator
from translines.translate.google import GoogleTranslator

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
DEFAULT_LINES = ["你好", "再见", "谢谢", "你觉得紧张吗？", "这是一个测试。"]


def _fake_translator(text: str) -> Result[str, str]:
    """Offline stand-in: random latency, deterministic output."""
    time.sleep(random.uniform(0.0, 0.05))
    return ok(f"{text}_T")


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run translines smoke test")
    parser.add_argument("--file", "-f", type=str, help="Path to a text file, one line per item")
    parser.add_argument("--live", action="store_true", help="Call the real Google endpoint")
    args = parser.parse_args()

    # 1. Prepare input
    if args.file:
        input_path = Path(args.file)
        if not input_path.exists():
            print(f"❌ File not found: {input_path}")
            return
        lines = input_path.read_text(encoding="utf-8").splitlines()
        print(f"\n📂 Using input file: {input_path} ({len(lines)} lines)")
    else:
        lines = DEFAULT_LINES * 20
        print(f"\n📝 Using default lines ({len(lines)} items)")

    # 2. Pick translator
    translator: Translator
    if args.live:
        try:
            translator = GoogleTranslator.from_settings()
        except MissingCredentialError as exc:
            print(f"❌ {exc}")
            sys.exit(1)
    else:
        translator = _fake_translator

    # 3. Execution
    try:
        result = run_pipeline(lines, translator, config=PipelineConfig(workers=8, rate_limit=200))
    except Exception as exc:
        print(f"\n❌ Pipeline Crashed: {exc}")
        traceback.print_exc()
        return

    # 4. Inspection
    print("\n" + "=" * 60)
    print("✅ Pipeline Finished")
    print("=" * 60)
    print(f"Lines:          {result['total']}")
    print(f"Failures:       {len(result['failures'])}")
    print(f"Max concurrent: {result['max_concurrent']}")
    print(f"Elapsed:        {result['elapsed_seconds']:.2f}s")

    in_order = all(o.position == i for i, o in enumerate(result["outcomes"]))
    print(f"Ordered:        {'yes' if in_order else 'NO'}")

    print("\n📌 First lines:")
    for src, out in list(zip(lines, result["texts"], strict=True))[:5]:
        print(f"  {src}  →  {out}")


if __name__ == "__main__":
    main()
