#!/usr/bin/env python3

import argparse
import asyncio
import csv
import html
import json
import logging
import sys
import zipfile
from datetime import datetime
from pathlib import Path

from config import ConfigError, Settings
from landing_page import build_suite
from runner import run_test_suite


def write_html_report(results_json: dict, html_path: Path):
    tests = results_json.get("tests", [])
    passed = sum(1 for r in tests if r.get("status") == "passed")
    failed = sum(1 for r in tests if r.get("status") == "failed")
    total = len(tests)
    base_url = html.escape(results_json.get("base_url", ""))

    doc = f"""
<html><head><title>Landing Page Link Report</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 20px; }}
.summary {{ margin-bottom: 16px; }}
.pass {{ color: #0a7b44; }}
.fail {{ color: #b00020; }}
pre {{ background: #f6f8fa; padding: 12px; border-radius: 6px; overflow: auto; }}
</style>
</head><body>
  <h1>Landing Page Link Report</h1>
  <div class="summary">
    <strong>Base URL:</strong> {base_url} &nbsp;
    <strong>Total:</strong> {total} &nbsp; <strong class="pass">Passed:</strong> {passed} &nbsp; <strong class="fail">Failed:</strong> {failed}
  </div>
  <hr />
  {''.join(render_test_result(tr) for tr in tests)}
</body></html>
"""
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(doc)


def render_test_result(test_result: dict) -> str:
    status_class = "pass" if test_result.get("status") == "passed" else "fail"
    name = html.escape(test_result.get("name", "Unnamed Test"))
    error = test_result.get("error", "")
    failed_step = test_result.get("failed_step", "")
    screenshot = test_result.get("screenshot", "")
    steps_rendered = html.escape(json.dumps(test_result.get("steps", []), indent=2, ensure_ascii=False))
    img_tag = f"<div><img src=\"{html.escape(screenshot)}\" style=\"max-width: 100%; border: 1px solid #ddd;\" /></div>" if screenshot else ""
    error_block = f"<pre>{html.escape(failed_step)}\n{html.escape(error)}</pre>" if error else ""
    return f"""
  <section>
    <h3 class="{status_class}">{name} — {test_result.get('status','unknown').upper()}</h3>
    <details>
      <summary>Steps</summary>
      <pre>{steps_rendered}</pre>
    </details>
    {img_tag}
    {error_block}
  </section>
  <hr />
"""


def archive_files(zip_path: Path, files: list[Path]):
    with zipfile.ZipFile(zip_path, "w") as zf:
        for f in files:
            if f.exists():
                zf.write(f, arcname=f.name)


def log_to_csv(log_path: Path, timestamp: str, artifacts: dict, summary: dict):
    csv_exists = log_path.exists()
    with open(log_path, "a", newline="") as csvfile:
        writer = csv.writer(csvfile)
        if not csv_exists:
            writer.writerow(["Timestamp", "Base URL", "Total", "Passed", "Failed", "Results", "Report", "Archive"])
        writer.writerow([
            timestamp,
            summary.get("base_url", ""),
            summary.get("total", 0),
            summary.get("passed", 0),
            summary.get("failed", 0),
            str(artifacts.get("results")),
            str(artifacts.get("report")),
            str(artifacts.get("archive")),
        ])


def select_scenarios(scenarios: list, only: list[str] | None) -> list:
    if not only:
        return scenarios
    needles = [o.lower() for o in only]
    return [s for s in scenarios if any(n in s.name.lower() for n in needles)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Landing page header link and CTA checks")
    parser.add_argument("--base-url", help="Base URL under test (default: $BASE_URL or http://localhost:3000/)")
    parser.add_argument("--headful", action="store_true", help="Run browser headful for debugging")
    parser.add_argument("--verbose", action="store_true", help="Print step logs and screenshot paths")
    parser.add_argument("--timeout-ms", type=int, help="Wait window for each assertion (default: $STEP_TIMEOUT_MS or 5000)")
    parser.add_argument("--cta-url-pattern", help="Regex the URL must match after clicking the hero CTA")
    parser.add_argument("--only", action="append", help="Run only scenarios whose name contains this text (repeatable)")
    parser.add_argument("--list", action="store_true", help="List scenarios and exit")
    parser.add_argument("--concurrency", type=int, default=1, help="Scenarios to run in parallel, each in its own browser context")
    parser.add_argument("--output-dir", default="data/runs", help="Directory that receives run_<timestamp> folders")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # playwright's asyncio transport is chatty at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    try:
        settings = Settings.from_env().with_overrides(
            base_url=args.base_url,
            step_timeout_ms=args.timeout_ms,
            cta_url_pattern=args.cta_url_pattern,
        )
    except ConfigError as e:
        print(f"✖ Invalid configuration: {e}", file=sys.stderr)
        return 2
    if args.concurrency < 1:
        print(f"✖ Invalid configuration: --concurrency must be at least 1 (got {args.concurrency})", file=sys.stderr)
        return 2

    scenarios = select_scenarios(build_suite(settings), args.only)
    if args.list:
        for s in scenarios:
            print(s.name)
        return 0
    if not scenarios:
        print("✖ No scenarios match --only filter", file=sys.stderr)
        return 2

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(args.output_dir) / f"run_{timestamp}"
    run_dir.mkdir(parents=True, exist_ok=True)

    print(f"🏃 Running {len(scenarios)} scenario(s) against {settings.base_url} ...")
    results_json = asyncio.run(run_test_suite(
        scenarios,
        run_dir=run_dir,
        settings=settings,
        headless=(not args.headful),
        verbose=args.verbose,
        concurrency=args.concurrency,
    ))

    results_path = run_dir / "results.json"
    with open(results_path, "w", encoding="utf-8") as f:
        json.dump(results_json, f, indent=2, ensure_ascii=False)
    print(f"📊 Results written: {results_path}")
    artifacts = {"results": results_path}

    report_path = run_dir / "report.html"
    write_html_report(results_json, report_path)
    artifacts["report"] = report_path
    print(f"📝 HTML report: {report_path}")

    archive_path = run_dir / "archive.zip"
    archive_files(archive_path, [results_path, report_path])
    artifacts["archive"] = archive_path
    print(f"📦 Archive: {archive_path}")

    tests = results_json.get("tests", [])
    total = len(tests)
    passed = sum(1 for r in tests if r.get("status") == "passed")
    failed = total - passed
    log_to_csv(Path(args.output_dir) / "run_log.csv", timestamp, artifacts, {
        "base_url": settings.base_url,
        "total": total,
        "passed": passed,
        "failed": failed,
    })

    print(f"✅ Done. Total: {total}, Passed: {passed}, Failed: {failed}")
    return 1 if failed else 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
